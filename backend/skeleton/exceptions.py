"""
Skeleton Backend - Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for the few ways this service can fail.
How:   Each exception carries a message and an optional context dict.
       Request errors also carry the HTTP status and the error code returned
       in the JSON body; the body-parsing middleware and the handlers
       registered in main.py turn them into responses.

Exception Hierarchy:
    SkeletonError (base)
    ├── RequestBodyError       → 400 Bad Request (malformed JSON body)
    ├── PayloadTooLargeError   → 413 Payload Too Large
    └── ServerStartupError     → fatal, process exits non-zero
"""

from typing import Any, Dict, Optional

from starlette.responses import JSONResponse

from skeleton.schemas.health import ErrorResponse


class SkeletonError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:     User-facing error description (safe to return in API response)
        context:     Additional debug info (logged but NOT returned to client)
        status_code: HTTP status used when the error reaches a client
        error_code:  Machine-readable code placed in the JSON error body
    """

    status_code: int = 500
    error_code: str = "internal_server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class RequestBodyError(SkeletonError):
    """
    Raised when a JSON request body cannot be parsed.

    When:  Invalid JSON, invalid UTF-8, or a top-level value that is not
           an object or array.
    HTTP:  400 Bad Request
    """

    status_code = 400
    error_code = "invalid_json"

    def __init__(
        self,
        message: str = "Request body is not valid JSON",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PayloadTooLargeError(SkeletonError):
    """Raised when a JSON body exceeds the configured size limit (HTTP 413)."""

    status_code = 413
    error_code = "payload_too_large"

    def __init__(
        self,
        limit: int,
        size: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Request body exceeds the {limit} byte limit"
        ctx = context or {}
        ctx["limit"] = limit
        if size is not None:
            ctx["size"] = size
        super().__init__(message=message, context=ctx)
        self.limit = limit


class ServerStartupError(SkeletonError):
    """
    Raised when the listener cannot be started.

    What:    Binding the TCP socket failed, or uvicorn gave up during startup.
    When:    Port already in use, permission denied on a privileged port,
             unresolvable host.
    Recovery: None. The CLI logs the error and exits with status 1.
    """

    def __init__(
        self,
        host: str,
        port: int,
        reason: str = "listener failed to start",
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Could not listen on {host}:{port}: {reason}"
        ctx = context or {}
        ctx.update({"host": host, "port": port})
        super().__init__(message=message, context=ctx)
        self.host = host
        self.port = port


def error_response(exc: SkeletonError, request_id: str = "") -> JSONResponse:
    """
    Build the JSON error response for an application error.

    Context is returned as `details` for client errors only; for 5xx it stays
    in the server log.
    """
    body = ErrorResponse(
        error=exc.error_code,
        message=exc.message,
        details=(exc.context or None) if exc.status_code < 500 else None,
        request_id=request_id,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
    )
