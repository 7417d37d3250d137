"""
Health check endpoints for the REST API.
Provides basic and detailed health status of the service and its dependencies.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from rest_api.services.health import system_health
from shared.config.settings import settings
from shared.utils.health import HealthStatus


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health_check():
    """
    Basic health check endpoint.
    Returns service status without checking dependencies.
    """
    return {
        "status": "healthy",
        "service": "rest-api",
        "environment": settings.environment,
    }


@router.get("/health/detailed")
async def detailed_health_check():
    """
    Detailed health check that verifies database and Redis connectivity.

    Returns 503 Service Unavailable if any dependency is down.
    """
    checks = await system_health()
    if checks["status"] != HealthStatus.HEALTHY.value:
        return JSONResponse(content=checks, status_code=503)
    return checks
