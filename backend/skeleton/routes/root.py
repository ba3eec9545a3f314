"""
Skeleton Backend - Root Route
=============================

GET / answers with a fixed plain-text line so a browser or curl can confirm
the server is up.
"""

from fastapi.responses import PlainTextResponse

ROOT_MESSAGE = "Server is running!"


async def read_root() -> PlainTextResponse:
    return PlainTextResponse(ROOT_MESSAGE)
