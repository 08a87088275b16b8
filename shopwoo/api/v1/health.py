"""
Health check endpoints
"""

import asyncio

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from shopwoo.api.dependencies import services
from shopwoo.core.config.settings import settings
from shopwoo.core.database.engine import check_engine_health
from shopwoo.core.logging import get_logger
from shopwoo.core.redis import get_redis_client_instance
from shopwoo.shared.helpers import now_utc
from shopwoo import __version__

logger = get_logger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": now_utc().isoformat(),
        "version": __version__,
        "services": sorted(services.keys()),
    }


@router.get("/health/dependencies")
async def dependencies_health_check():
    """Database and Redis connectivity"""
    timeout = settings.HEALTH_CHECK_TIMEOUT

    try:
        database_ok = await asyncio.wait_for(check_engine_health(), timeout=timeout)
    except asyncio.TimeoutError:
        database_ok = False

    try:
        redis_ok = await asyncio.wait_for(
            get_redis_client_instance().ping(), timeout=timeout
        )
    except asyncio.TimeoutError:
        redis_ok = False

    healthy = database_ok and redis_ok
    if not healthy:
        logger.warning("Dependency health check failed", database=database_ok, redis=redis_ok)

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "database": database_ok,
            "redis": redis_ok,
            "timestamp": now_utc().isoformat(),
        },
    )
