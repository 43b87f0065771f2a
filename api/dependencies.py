"""
FastAPI dependencies for dependency injection.

Provides singleton instances of core services to route handlers.
"""

from typing import Optional

from manager.odds_service import OddsService


# Global singleton (set during app lifespan)
_odds_service: Optional[OddsService] = None


def set_odds_service(service: Optional[OddsService]) -> None:
    """Set the global odds service instance."""
    global _odds_service
    _odds_service = service


async def get_odds_service() -> OddsService:
    """
    Dependency that provides the odds service.

    Usage:
        @router.post("/odds")
        async def evaluate(
            service: OddsService = Depends(get_odds_service)
        ):
            ...
    """
    if _odds_service is None:
        raise RuntimeError("Odds service not initialized")
    return _odds_service
