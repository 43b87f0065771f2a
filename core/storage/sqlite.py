"""
SQLite storage backend implementation.

Provides SQLite implementations for:
- Stand expectation cache (cacheDB/stand_odds.db by default)
- Odds database written by the batch writer
"""

from pathlib import Path
from typing import Iterable, Optional

from sqlalchemy import Engine, inspect, text

from blackjack.rules import Action
from core.database import dispose_engine, get_engine, quote_identifier
from core.logging import get_logger
from core.storage.base import BaseOddsRepository, BaseStandCacheStore, OddsRecord


logger = get_logger(__name__)


class SQLiteStandCacheStore(BaseStandCacheStore):
    """
    SQLite-based stand expectation cache.

    Uses a synchronous SQLAlchemy engine; cache builds are CPU bound
    and run in a single thread.
    """

    def __init__(self, path: str | Path, echo: bool = False):
        """
        Initialize SQLite stand cache store.

        Args:
            path: Database file; created with its directory if missing
            echo: Whether to echo SQL statements
        """
        self._path = Path(path)
        self._echo = echo
        self._engine: Optional[Engine] = None

    def setup(self) -> None:
        if self._engine is None:
            self._engine = get_engine(self._path, echo=self._echo)
            logger.info("SQLite stand cache store opened", path=str(self._path))

    def _get_engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError(
                "Store not initialized. Call setup() first."
            )
        return self._engine

    def has_table(self, table: str) -> bool:
        return inspect(self._get_engine()).has_table(table)

    def create_table(self, table: str, keys: Iterable[int]) -> None:
        name = quote_identifier(table)
        rows = [{"id": key} for key in keys]
        with self._get_engine().begin() as conn:
            conn.execute(text(
                f"CREATE TABLE IF NOT EXISTS {name} (ID INTEGER PRIMARY KEY NOT NULL)"
            ))
            if rows:
                conn.execute(
                    text(f"INSERT OR IGNORE INTO {name} (ID) VALUES (:id)"),
                    rows,
                )
        logger.info("Stand cache table created", table=table, rows=len(rows))

    def has_column(self, table: str, column: str) -> bool:
        if not self.has_table(table):
            return False
        columns = inspect(self._get_engine()).get_columns(table)
        return any(col["name"] == column for col in columns)

    def write_column(self, table: str, column: str, values: dict[int, float]) -> None:
        name = quote_identifier(table)
        col = quote_identifier(column)
        with self._get_engine().begin() as conn:
            conn.execute(text(f"ALTER TABLE {name} ADD COLUMN {col} REAL"))
            if values:
                conn.execute(
                    text(f"UPDATE {name} SET {col} = :odds WHERE ID = :id"),
                    [{"id": key, "odds": odds} for key, odds in values.items()],
                )
        logger.info(
            "Stand cache column written",
            table=table,
            column=column,
            values=len(values),
        )

    def load_column(self, table: str, column: str) -> dict[int, float]:
        name = quote_identifier(table)
        col = quote_identifier(column)
        with self._get_engine().connect() as conn:
            result = conn.execute(
                text(f"SELECT ID, {col} FROM {name} WHERE {col} IS NOT NULL")
            )
            return {row[0]: row[1] for row in result}

    def close(self) -> None:
        if self._engine is not None:
            dispose_engine(self._path)
            self._engine = None
        logger.debug("SQLite stand cache store closed", path=str(self._path))


class SQLiteOddsRepository(BaseOddsRepository):
    """
    SQLite-based odds database.

    One table per action: (ID INTEGER PRIMARY KEY NOT NULL, Odds REAL).
    """

    def __init__(self, path: str | Path, echo: bool = False):
        self._path = Path(path)
        self._echo = echo
        self._engine: Optional[Engine] = None

    def exists(self) -> bool:
        return self._path.exists()

    def setup(self) -> None:
        self._engine = get_engine(self._path, echo=self._echo)
        with self._engine.begin() as conn:
            for action in Action:
                conn.execute(text(
                    f"CREATE TABLE IF NOT EXISTS {quote_identifier(action.value)} "
                    "(ID INTEGER PRIMARY KEY NOT NULL, Odds REAL)"
                ))
        logger.info("SQLite odds repository initialized", path=str(self._path))

    def _get_engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError(
                "Repository not initialized. Call setup() first."
            )
        return self._engine

    def write_many(self, records: Iterable[OddsRecord]) -> None:
        by_action: dict[Action, list[dict]] = {}
        for record in records:
            by_action.setdefault(record.action, []).append(record.to_dict())

        with self._get_engine().begin() as conn:
            for action, rows in by_action.items():
                conn.execute(
                    text(
                        f"INSERT INTO {quote_identifier(action.value)} (ID, Odds) "
                        "VALUES (:id, :odds)"
                    ),
                    rows,
                )

    def get(self, action: Action, key: int) -> Optional[float]:
        with self._get_engine().connect() as conn:
            return conn.execute(
                text(f"SELECT Odds FROM {quote_identifier(action.value)} WHERE ID = :id"),
                {"id": key},
            ).scalar()

    def count(self, action: Action) -> int:
        with self._get_engine().connect() as conn:
            return conn.execute(
                text(f"SELECT COUNT(*) FROM {quote_identifier(action.value)}")
            ).scalar_one()

    def close(self) -> None:
        if self._engine is not None:
            dispose_engine(self._path)
            self._engine = None
        logger.info("SQLite odds repository closed", path=str(self._path))
