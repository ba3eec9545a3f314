"""
Skeleton Backend - Route Table
==============================

What:  The complete set of HTTP routes, declared as data.
How:   ROUTES is an ordered sequence of (method, path, handler) entries;
       `register_routes()` mounts each one on the app. Anything not listed
       here gets the framework's 404.

Route Inventory:
    - GET /         → root.read_root      (plain text "Server is running!")
    - GET /health   → health.health_check (JSON liveness report)
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from fastapi import FastAPI

from skeleton.routes.health import health_check
from skeleton.routes.root import read_root
from skeleton.schemas.health import HealthResponse


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    handler: Callable[..., Any]
    response_model: Optional[Any] = None
    summary: str = ""
    tags: Tuple[str, ...] = field(default_factory=tuple)


ROUTES: Tuple[Route, ...] = (
    Route("GET", "/", read_root, summary="Server banner", tags=("Root",)),
    Route(
        "GET",
        "/health",
        health_check,
        response_model=HealthResponse,
        summary="Service health check",
        tags=("Health",),
    ),
)


def register_routes(app: FastAPI, routes: Tuple[Route, ...] = ROUTES) -> None:
    """Mount every route of the table on `app`, in order."""
    for route in routes:
        kwargs: Dict[str, Any] = {
            "methods": [route.method],
            "summary": route.summary or None,
            "tags": list(route.tags) or None,
        }
        if route.response_model is not None:
            kwargs["response_model"] = route.response_model
        app.add_api_route(route.path, route.handler, **kwargs)
