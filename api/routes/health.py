"""
Health check endpoints.

Provides endpoints for monitoring and load balancer health checks.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_odds_service
from core.logging import get_logger
from manager.odds_service import OddsService


logger = get_logger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    """
    Basic health check.

    Returns 200 if the service is running.
    """
    return {
        "status": "healthy",
        "service": "blackjack-odds",
    }


@router.get("/ready")
async def readiness_check(
    service: OddsService = Depends(get_odds_service),
) -> dict:
    """
    Readiness check.

    Reports the storage backend and the stand caches loaded so far.
    """
    return {
        "status": "ready",
        "checks": {
            "storage_backend": service.settings.storage_backend,
            "stand_caches_loaded": service.loaded_cache_count,
        },
    }
