"""
In-memory storage backend.

Nothing survives the process. Used by tests and by API deployments
that should not touch the filesystem.
"""

from typing import Iterable, Optional

from blackjack.rules import Action
from core.storage.base import BaseOddsRepository, BaseStandCacheStore, OddsRecord


class MemoryStandCacheStore(BaseStandCacheStore):
    """Stand cache tables held as nested dictionaries."""

    def __init__(self):
        self._tables: dict[str, dict[int, dict[str, float]]] = {}
        self._columns: dict[str, set[str]] = {}

    def setup(self) -> None:
        pass

    def has_table(self, table: str) -> bool:
        return table in self._tables

    def create_table(self, table: str, keys: Iterable[int]) -> None:
        rows = self._tables.setdefault(table, {})
        self._columns.setdefault(table, set())
        for key in keys:
            rows.setdefault(key, {})

    def has_column(self, table: str, column: str) -> bool:
        return column in self._columns.get(table, set())

    def write_column(self, table: str, column: str, values: dict[int, float]) -> None:
        if table not in self._tables:
            raise KeyError(f"No such table: {table}")
        if column in self._columns[table]:
            raise ValueError(f"Duplicate column {column} in table {table}")
        self._columns[table].add(column)
        rows = self._tables[table]
        for key, odds in values.items():
            if key in rows:
                rows[key][column] = odds

    def load_column(self, table: str, column: str) -> dict[int, float]:
        return {
            key: row[column]
            for key, row in self._tables.get(table, {}).items()
            if column in row
        }

    def close(self) -> None:
        pass


class MemoryOddsRepository(BaseOddsRepository):
    """Odds tables held as dictionaries keyed by hash key."""

    def __init__(self):
        self._tables: Optional[dict[Action, dict[int, float]]] = None

    def exists(self) -> bool:
        return self._tables is not None

    def setup(self) -> None:
        if self._tables is None:
            self._tables = {action: {} for action in Action}

    def _get_tables(self) -> dict[Action, dict[int, float]]:
        if self._tables is None:
            raise RuntimeError(
                "Repository not initialized. Call setup() first."
            )
        return self._tables

    def write_many(self, records: Iterable[OddsRecord]) -> None:
        tables = self._get_tables()
        for record in records:
            table = tables[record.action]
            if record.key in table:
                raise ValueError(
                    f"Duplicate key {record.key} in table {record.action.value}"
                )
            table[record.key] = record.odds

    def get(self, action: Action, key: int) -> Optional[float]:
        return self._get_tables()[action].get(key)

    def count(self, action: Action) -> int:
        return len(self._get_tables()[action])

    def close(self) -> None:
        pass
