"""
API route modules.
"""

from api.routes.odds import router as odds_router
from api.routes.health import router as health_router

__all__ = ["odds_router", "health_router"]
