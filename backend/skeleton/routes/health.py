"""
Skeleton Backend - Health Check Route
=====================================

What:  Liveness endpoint for monitoring and load balancer probes.
How:   No dependency checks: there are no dependencies. If the process can
       answer, it is healthy.

Response (always 200):
    {"status": "ok", "message": "Backend is healthy!"}
"""

from skeleton.schemas.health import HealthResponse


async def health_check() -> HealthResponse:
    """Report process liveness."""
    return HealthResponse(status="ok", message="Backend is healthy!")
