"""
Abstract base classes for storage backends.

This module defines the contracts that all storage implementations must follow,
enabling pluggable backends for the stand expectation cache and the odds database.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from blackjack.rules import Action


@dataclass
class OddsRecord:
    """
    One row of the odds database.

    key is the (player hand, dealer up-card) hash key from
    blackjack.encoding; odds is the expected return of the action.
    """
    key: int
    action: Action
    odds: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to bind parameters for an INSERT."""
        return {"id": self.key, "odds": self.odds}


class BaseStandCacheStore(ABC):
    """
    Abstract base class for stand expectation cache storage.

    Values are organised as one table per rule set (keyed by hash key)
    with one column per composition of withdrawn cards, so a cache for
    new withdrawn cards adds a column to an existing table.
    """

    @abstractmethod
    def setup(self) -> None:
        """
        Open the storage.

        This should be idempotent - safe to call multiple times.
        """
        pass

    @abstractmethod
    def has_table(self, table: str) -> bool:
        """Check whether the rule-set table exists."""
        pass

    @abstractmethod
    def create_table(self, table: str, keys: Iterable[int]) -> None:
        """Create the rule-set table with one row per hash key."""
        pass

    @abstractmethod
    def has_column(self, table: str, column: str) -> bool:
        """Check whether values for a withdrawn composition are stored."""
        pass

    @abstractmethod
    def write_column(self, table: str, column: str, values: dict[int, float]) -> None:
        """
        Add a column and fill it with values by hash key.

        Keys without a row in the table are ignored.
        """
        pass

    @abstractmethod
    def load_column(self, table: str, column: str) -> dict[int, float]:
        """Read the non-empty values of a column by hash key."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Clean up resources (connections, pools)."""
        pass


class BaseOddsRepository(ABC):
    """
    Abstract base class for the odds database.

    Holds one table per Action with the expected return of that
    action for each (player hand, dealer up-card) hash key.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check whether the database has already been written."""
        pass

    @abstractmethod
    def setup(self) -> None:
        """Create one table per action."""
        pass

    @abstractmethod
    def write_many(self, records: Iterable[OddsRecord]) -> None:
        """Insert records in one transaction."""
        pass

    @abstractmethod
    def get(self, action: Action, key: int) -> Optional[float]:
        """Get the expected return of an action, or None if not stored."""
        pass

    @abstractmethod
    def count(self, action: Action) -> int:
        """Number of records stored for an action."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Clean up resources."""
        pass
