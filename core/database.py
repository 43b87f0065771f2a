"""
SQLite engine management.

Engines are created lazily, one per database file, and reused for the
life of the process. The SQLite storage backend in core.storage.sqlite
is the only caller; tests dispose of engines between runs.
"""

import re
from pathlib import Path
from typing import Optional

from sqlalchemy import Engine, create_engine

from core.logging import get_logger


logger = get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")

_engines: dict[str, Engine] = {}


def sqlite_url(path: str | Path) -> str:
    return f"sqlite:///{Path(path)}"


def quote_identifier(name: str) -> str:
    """
    Quote a table or column name for use in SQL text.

    Identifiers cannot be bound as parameters, so only plain names
    (letters, digits, underscores) are accepted.
    """
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return f'"{name}"'


def get_engine(path: str | Path, echo: bool = False) -> Engine:
    """
    Get or create the engine for a SQLite database file.

    The parent directory is created if missing.
    """
    key = str(Path(path).resolve())
    engine: Optional[Engine] = _engines.get(key)
    if engine is None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(sqlite_url(path), echo=echo)
        _engines[key] = engine
        logger.debug("SQLite engine created", path=str(path))
    return engine


def dispose_engine(path: str | Path) -> None:
    """Close the pooled connections of one database file."""
    engine = _engines.pop(str(Path(path).resolve()), None)
    if engine is not None:
        engine.dispose()


def dispose_engines() -> None:
    """Close all database connections."""
    for engine in _engines.values():
        engine.dispose()
    _engines.clear()
