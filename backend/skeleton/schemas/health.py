"""
Skeleton Backend - Pydantic Response Schemas
============================================

What:  Response models for the health check and for error bodies.
How:   FastAPI serializes HealthResponse for GET /health and lists
       ErrorResponse in the OpenAPI document for 4xx/5xx answers.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """
    What:  Liveness report returned by GET /health.
    Who:   Load balancers, container health checks, uptime monitors.

    The body is fixed: the process answering at all is the signal.
        {"status": "ok", "message": "Backend is healthy!"}
    """
    status: str = Field(default="ok", description="Always 'ok' while the process serves requests")
    message: str = Field(default="Backend is healthy!", description="Human-readable status line")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for errors raised by this service.

    Example:
        {
            "error": "invalid_json",
            "message": "Request body is not valid JSON: Expecting ',' delimiter",
            "details": {"line": 1, "column": 7},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable description")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Extra context, if any")
    request_id: str = Field(default="", description="Correlation ID for server logs")
