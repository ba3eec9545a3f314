"""
Skeleton Backend - Middleware Package
=====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [Cross-Origin] → [JSON Body] → Route

    1. Request ID first: every later log line and error body can use it
    2. Logging: sees the final status of everything below it
    3. Cross-Origin: wraps body parsing so 400/413 answers carry CORS headers too
    4. JSON Body: last, directly in front of the route handlers

The chain is declared as data by `middleware_stack()`; the first entry is the
outermost layer.
"""

from typing import List

from starlette.middleware import Middleware

from skeleton.config import Settings
from skeleton.middleware.cors import CrossOriginMiddleware
from skeleton.middleware.json_body import JSONBodyMiddleware
from skeleton.middleware.logging import RequestLoggingMiddleware
from skeleton.middleware.request_id import RequestIDMiddleware


def middleware_stack(settings: Settings) -> List[Middleware]:
    """Ordered middleware list for the application, outermost first."""
    return [
        Middleware(RequestIDMiddleware),
        Middleware(RequestLoggingMiddleware),
        Middleware(CrossOriginMiddleware, origins=settings.cors_origins_list),
        Middleware(JSONBodyMiddleware, limit=settings.json_body_limit),
    ]
