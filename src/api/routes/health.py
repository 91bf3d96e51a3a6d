"""
Health check endpoint.
"""

import time

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.api.dependencies import get_database
from src.api.models import ComponentHealth, HealthResponse
from src.config.settings import get_settings
from src.storage.database import Database

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _check_database(db: Database) -> ComponentHealth:
    """Check database connectivity and measure latency."""
    start = time.perf_counter()
    try:
        healthy = await db.health_check()
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="healthy" if healthy else "unhealthy",
            latency_ms=round(latency_ms, 2),
        )
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="unhealthy",
            latency_ms=round(latency_ms, 2),
            details={"error": str(e)},
        )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Check the health of the service and its database.",
)
async def health_check(db: Database = Depends(get_database)):
    """
    Report service health.

    Returns 503 when the database is unreachable, since no search can be
    served without it.
    """
    settings = get_settings()
    db_health = await _check_database(db)
    status = db_health.status

    response = HealthResponse(
        status=status,
        components={"database": db_health},
        market_data_configured=settings.market_data_configured,
    )
    if status != "healthy":
        logger.warning("Health check failed", components=response.model_dump()["components"])
        return JSONResponse(status_code=503, content=response.model_dump())
    return response
