"""
Storage factory for creating storage backend instances.

This module provides factory functions to create the appropriate
storage implementations based on configuration.
"""

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from core.logging import get_logger
from core.storage.base import BaseOddsRepository, BaseStandCacheStore


if TYPE_CHECKING:
    from core.config import Settings


logger = get_logger(__name__)


class StorageBackend(str, Enum):
    """Supported storage backends."""
    SQLITE = "sqlite"
    MEMORY = "memory"


def get_storage_backend(settings: "Settings") -> StorageBackend:
    """
    Determine which storage backend to use based on settings.

    Args:
        settings: Application settings

    Returns:
        The configured storage backend
    """
    backend_str = settings.storage_backend.lower()

    try:
        return StorageBackend(backend_str)
    except ValueError:
        raise ValueError(
            f"Unsupported storage backend: {backend_str}. "
            f"Supported backends: {[b.value for b in StorageBackend]}"
        )


def create_stand_cache_store(settings: "Settings") -> BaseStandCacheStore:
    """
    Create a stand cache store based on settings.

    Args:
        settings: Application settings

    Returns:
        Configured store instance (not yet initialized)
    """
    backend = get_storage_backend(settings)

    if backend == StorageBackend.SQLITE:
        from core.storage.sqlite import SQLiteStandCacheStore

        logger.info(
            "Creating SQLite stand cache store",
            path=settings.stand_cache_path,
        )
        return SQLiteStandCacheStore(
            path=settings.stand_cache_path,
            echo=settings.sqlite_echo,
        )

    elif backend == StorageBackend.MEMORY:
        from core.storage.memory import MemoryStandCacheStore

        logger.info("Creating in-memory stand cache store")
        return MemoryStandCacheStore()

    else:
        raise ValueError(f"Unsupported backend: {backend}")


def create_odds_repository(
    settings: "Settings",
    path: Optional[str | Path] = None,
) -> BaseOddsRepository:
    """
    Create an odds repository based on settings.

    Args:
        settings: Application settings
        path: Database file; defaults to settings.odds_db_path

    Returns:
        Configured repository instance (not yet initialized)
    """
    backend = get_storage_backend(settings)

    if backend == StorageBackend.SQLITE:
        from core.storage.sqlite import SQLiteOddsRepository

        path = path or settings.odds_db_path
        logger.info("Creating SQLite odds repository", path=str(path))
        return SQLiteOddsRepository(path=path, echo=settings.sqlite_echo)

    elif backend == StorageBackend.MEMORY:
        from core.storage.memory import MemoryOddsRepository

        logger.info("Creating in-memory odds repository")
        return MemoryOddsRepository()

    else:
        raise ValueError(f"Unsupported backend: {backend}")
