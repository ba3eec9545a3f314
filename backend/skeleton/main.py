"""
Skeleton Backend - FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() assembles the middleware chain and the
       route table (both declared as data) into a FastAPI instance.
Who:   server.start()/run(), uvicorn (`uvicorn skeleton.main:app`), tests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────┐ ┌─────────┐ ┌──────────────┐ ┌───────────┐  │
    │  │ Req ID │→│ Logging │→│ Cross-Origin │→│ JSON Body │  │
    │  └────────┘ └─────────┘ └──────────────┘ └───────────┘  │
    │                                                          │
    │  Routes:                                                 │
    │  ┌──────────┐ ┌──────────────┐ ┌──────────────────────┐ │
    │  │ GET /    │ │ GET /health  │ │ anything else → 404  │ │
    │  └──────────┘ └──────────────┘ └──────────────────────┘ │
    │                                                          │
    │  Exception Handlers:                                     │
    │  ┌──────────────────────────────────────────────────┐   │
    │  │ SkeletonError → its status │ Exception → 500     │   │
    │  └──────────────────────────────────────────────────┘   │
    └──────────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from skeleton import __version__
from skeleton.config import Settings, settings as default_settings
from skeleton.exceptions import SkeletonError, error_response
from skeleton.middleware import middleware_stack
from skeleton.middleware.cors import apply_origin_headers
from skeleton.middleware.request_id import request_id_var
from skeleton.routes import register_routes

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the whole process.

    Called once by the entry point before the listener is bound. Output goes
    to stdout in the form:
        2024-01-15T12:00:00 [INFO] skeleton.server: Server is running at http://localhost:4000
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # skeleton.access already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log startup and shutdown; the service holds no resources to open or close."""
    logger.info("Skeleton backend %s starting up...", __version__)
    yield
    logger.info("Skeleton backend shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """
    Map exceptions escaping route handlers to JSON responses.

        SkeletonError (and subclasses) → exc.status_code, ErrorResponse body
        Exception (fallback)           → 500, generic message, trace logged

    The fallback response is sent by ServerErrorMiddleware, outside the
    middleware chain, so it gets its cross-origin headers here.

    Framework errors (404 for unknown paths, 405 for unknown methods) keep
    FastAPI's default handling.
    """

    @app.exception_handler(SkeletonError)
    async def handle_skeleton_error(request: Request, exc: SkeletonError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
        else:
            logger.warning("[%s] %s", rid, exc.message)
        return error_response(exc, rid)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # The request-id middleware has already unwound; its value survives on request.state
        rid = request_id_var.get("") or getattr(request.state, "request_id", "")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        response = JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred.",
                "request_id": rid,
            },
        )
        return apply_origin_headers(response, request, settings.cors_origins_list)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to build from; defaults to the process-wide
                  `skeleton.config.settings` singleton.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Skeleton API",
        description="Minimal HTTP backend: a root banner and a health check.",
        version=__version__,
        middleware=middleware_stack(settings),
        lifespan=lifespan,
    )

    register_exception_handlers(app, settings)
    register_routes(app)

    return app


# uvicorn expects `skeleton.main:app` to be importable
app = create_app()
