"""
Storage abstraction layer.

Provides pluggable storage backends for:
- Stand expectation cache (one table per rule set)
- Odds database (one table per player action)

Supported backends:
- SQLite (default, persistent)
- In-memory (tests, ephemeral API deployments)
"""

from core.storage.base import (
    BaseOddsRepository,
    BaseStandCacheStore,
    OddsRecord,
)
from core.storage.factory import (
    create_odds_repository,
    create_stand_cache_store,
    get_storage_backend,
    StorageBackend,
)

__all__ = [
    # Abstract interfaces
    "BaseOddsRepository",
    "BaseStandCacheStore",
    "OddsRecord",
    # Factory functions
    "create_odds_repository",
    "create_stand_cache_store",
    "get_storage_backend",
    "StorageBackend",
]
