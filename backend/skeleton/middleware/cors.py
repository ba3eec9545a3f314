"""
Skeleton Backend - Cross-Origin Middleware
==========================================

What:  Adds permissive cross-origin headers to every response and answers
       CORS preflight requests.
Why:   Browser frontends served from another origin call this API directly.
How:   Starlette's CORSMiddleware only decorates requests that carry an Origin
       header. This service sends Access-Control-Allow-Origin on EVERY
       response (200, 404, 400 from body parsing, ...), so the headers are
       injected here after the downstream app has answered.

Preflight:
    OPTIONS + Access-Control-Request-Method
        → 204, Allow-Methods: GET,HEAD,PUT,PATCH,POST,DELETE
               Allow-Headers: echo of Access-Control-Request-Headers

Origins:
    ["*"]                     → "Access-Control-Allow-Origin: *"
    ["https://a.example", …]  → the request's Origin when listed, plus Vary: Origin
"""

from typing import Optional, Sequence

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

ALLOW_METHODS = ("GET", "HEAD", "PUT", "PATCH", "POST", "DELETE")


def apply_origin_headers(
    response: Response, request: Request, origins: Sequence[str]
) -> Response:
    """
    Set Access-Control-Allow-Origin (and Vary) on `response` for `origins`.

    Shared by the middleware and by the catch-all 500 handler, whose response
    is sent from outside the middleware chain.
    """
    allow_all = not origins or "*" in origins
    if allow_all:
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    origin = request.headers.get("origin")
    if origin and origin in origins:
        response.headers["Access-Control-Allow-Origin"] = origin
    response.headers.add_vary_header("Origin")
    return response


class CrossOriginMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, origins: Optional[Sequence[str]] = None, **kwargs):
        super().__init__(app, **kwargs)
        self.origins = list(origins) if origins else ["*"]

    @staticmethod
    def is_preflight(request: Request) -> bool:
        return (
            request.method == "OPTIONS"
            and "access-control-request-method" in request.headers
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if self.is_preflight(request):
            response = Response(status_code=204)
            response.headers["Access-Control-Allow-Methods"] = ",".join(ALLOW_METHODS)
            requested_headers = request.headers.get("access-control-request-headers")
            if requested_headers:
                response.headers["Access-Control-Allow-Headers"] = requested_headers
                response.headers.add_vary_header("Access-Control-Request-Headers")
        else:
            response = await call_next(request)

        return apply_origin_headers(response, request, self.origins)
