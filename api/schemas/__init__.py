"""
Pydantic schemas for API request/response validation.
"""

from api.schemas.odds import (
    OddsRequest,
    OddsResponse,
)

__all__ = [
    "OddsRequest",
    "OddsResponse",
]
