"""
Skeleton Backend - JSON Body Parsing Middleware
===============================================

What:  Parses JSON request bodies before any route handler runs.
How:   For requests with Content-Type application/json (or application/*+json)
       the body is read, size-checked, decoded and parsed; the result lands on
       `request.state.json_body`. Other content types pass through untouched.

Outcomes:
    zero-length body                → json_body = {}
    body over json_body_limit       → 413 payload_too_large
    invalid UTF-8 / invalid JSON    → 400 invalid_json (whitespace-only included)
    top-level scalar (1, "a", null) → 400 invalid_json (strict mode)
    object or array                 → json_body = parsed value

Errors are answered here directly instead of being raised: exceptions raised
inside user middleware never reach the exception handlers registered on the
app, which sit further down the stack.
"""

import json
import logging
import re
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from skeleton.exceptions import (
    PayloadTooLargeError,
    RequestBodyError,
    SkeletonError,
    error_response,
)
from skeleton.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = re.compile(r"^application/(?:[\w.+-]+\+)?json$")


def is_json_content_type(content_type: str) -> bool:
    """True for application/json and structured-syntax types like application/vnd.api+json."""
    media_type = content_type.split(";", 1)[0].strip().lower()
    return bool(JSON_MEDIA_TYPE.match(media_type))


def parse_json_body(body: bytes, limit: int) -> Any:
    """
    Decode and parse a JSON request body.

    Raises:
        PayloadTooLargeError: body longer than `limit` bytes
        RequestBodyError:     not UTF-8, not JSON, or not an object/array
    """
    if len(body) > limit:
        raise PayloadTooLargeError(limit=limit, size=len(body))
    if not body:
        return {}

    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RequestBodyError(
            "Request body is not valid UTF-8",
            context={"position": exc.start},
        ) from exc

    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RequestBodyError(
            f"Request body is not valid JSON: {exc.msg}",
            context={"line": exc.lineno, "column": exc.colno},
        ) from exc

    if not isinstance(value, (dict, list)):
        raise RequestBodyError(
            "JSON body must be an object or an array",
            context={"type": type(value).__name__},
        )
    return value


class JSONBodyMiddleware(BaseHTTPMiddleware):
    """Parses JSON bodies into `request.state.json_body`; see module docstring."""

    def __init__(self, app, limit: int = 102_400, **kwargs):
        super().__init__(app, **kwargs)
        self.limit = limit

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        content_type = request.headers.get("content-type")
        if not content_type or not is_json_content_type(content_type):
            return await call_next(request)

        try:
            # Reject on the declared length before reading anything
            declared = request.headers.get("content-length", "")
            if declared.isdigit() and int(declared) > self.limit:
                raise PayloadTooLargeError(limit=self.limit, size=int(declared))

            body = await self.read_body(request)
            request.state.json_body = parse_json_body(body, self.limit)
        except SkeletonError as exc:
            rid = request_id_var.get("")
            logger.warning("[%s] Rejected request body: %s", rid, exc.message)
            return error_response(exc, rid)

        return await call_next(request)

    async def read_body(self, request: Request) -> bytes:
        """
        Read the body chunk by chunk, stopping as soon as it passes the limit.

        Chunked uploads carry no Content-Length, so the running total is the
        only guard. The collected bytes are cached on the request so handlers
        downstream read them again through request.body().
        """
        chunks = []
        size = 0
        async for chunk in request.stream():
            size += len(chunk)
            if size > self.limit:
                raise PayloadTooLargeError(limit=self.limit, size=size)
            chunks.append(chunk)
        body = b"".join(chunks)
        request._body = body
        return body
