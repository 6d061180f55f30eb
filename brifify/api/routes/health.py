"""Health check endpoints."""

import structlog
from fastapi import APIRouter, Depends, Response

from brifify import __version__
from brifify.api.dependencies import get_container
from brifify.container import ServiceContainer
from brifify.kernel.time import isoformat_z, utc_now

router = APIRouter()
logger = structlog.get_logger()

_startup_time = utc_now()


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if the service is running.
    """
    now = utc_now()
    return {
        "status": "healthy",
        "service": "brifify",
        "version": __version__,
        "timestamp": isoformat_z(now),
        "uptime_seconds": (now - _startup_time).total_seconds(),
    }


@router.get("/ready")
async def readiness_check(
    response: Response,
    container: ServiceContainer = Depends(get_container),
):
    """Verifies the storage backend answers."""
    checks = await container.check_ready()
    all_healthy = all(checks.values())
    if not all_healthy:
        response.status_code = 503

    return {
        "status": "ready" if all_healthy else "degraded",
        "checks": checks,
        "timestamp": isoformat_z(utc_now()),
    }
