"""
Tests for the storage backends and factory.
"""

import pytest

from blackjack.rules import Action
from core.config import Settings
from core.storage import (
    OddsRecord,
    StorageBackend,
    create_odds_repository,
    create_stand_cache_store,
    get_storage_backend,
)
from core.storage.memory import MemoryOddsRepository, MemoryStandCacheStore
from core.storage.sqlite import SQLiteOddsRepository, SQLiteStandCacheStore


@pytest.fixture(params=["sqlite", "memory"])
def stand_store(request, tmp_path):
    if request.param == "sqlite":
        store = SQLiteStandCacheStore(tmp_path / "cacheDB" / "stand_odds.db")
    else:
        store = MemoryStandCacheStore()
    store.setup()
    yield store
    store.close()


@pytest.fixture(params=["sqlite", "memory"])
def odds_repository(request, tmp_path):
    if request.param == "sqlite":
        return SQLiteOddsRepository(tmp_path / "odds.db")
    return MemoryOddsRepository()


class TestStandCacheStore:
    def test_table_lifecycle(self, stand_store):
        assert not stand_store.has_table("S8")
        assert not stand_store.has_column("S8", "C0_0_0_0_0_0_0_0_0_0")

        stand_store.create_table("S8", [10, 20, 30])

        assert stand_store.has_table("S8")
        assert not stand_store.has_column("S8", "C0_0_0_0_0_0_0_0_0_0")

    def test_column_round_trip(self, stand_store):
        stand_store.create_table("H6", [10, 20, 30])
        # Key 40 has no row and is dropped
        stand_store.write_column("H6", "C0_0_0_0_0_0_0_0_0_0", {10: 0.25, 20: -0.5, 40: 1.0})

        assert stand_store.has_column("H6", "C0_0_0_0_0_0_0_0_0_0")
        assert stand_store.load_column("H6", "C0_0_0_0_0_0_0_0_0_0") == {10: 0.25, 20: -0.5}

    def test_columns_are_independent(self, stand_store):
        stand_store.create_table("S8", [10, 20])
        stand_store.write_column("S8", "C0_0_0_0_0_0_0_0_0_0", {10: 0.1, 20: 0.2})
        stand_store.write_column("S8", "C1_0_0_0_0_0_0_0_0_0", {20: 0.3})

        assert stand_store.load_column("S8", "C0_0_0_0_0_0_0_0_0_0") == {10: 0.1, 20: 0.2}
        assert stand_store.load_column("S8", "C1_0_0_0_0_0_0_0_0_0") == {20: 0.3}


def test_sqlite_store_requires_setup(tmp_path):
    store = SQLiteStandCacheStore(tmp_path / "stand.db")

    with pytest.raises(RuntimeError, match="Call setup"):
        store.has_table("S8")


def test_sqlite_store_persists_across_instances(tmp_path):
    path = tmp_path / "nested" / "stand.db"
    first = SQLiteStandCacheStore(path)
    first.setup()
    first.create_table("S1", [7])
    first.write_column("S1", "C0_0_0_0_0_0_0_0_0_0", {7: 0.125})
    first.close()

    second = SQLiteStandCacheStore(path)
    second.setup()

    assert path.exists()
    assert second.load_column("S1", "C0_0_0_0_0_0_0_0_0_0") == {7: 0.125}
    second.close()


def test_sqlite_store_rejects_unsafe_identifiers(tmp_path):
    store = SQLiteStandCacheStore(tmp_path / "stand.db")
    store.setup()

    with pytest.raises(ValueError, match="Invalid SQL identifier"):
        store.create_table('S8"; DROP TABLE x; --', [1])
    store.close()


class TestOddsRepository:
    def test_write_and_read(self, odds_repository):
        assert not odds_repository.exists()

        odds_repository.setup()
        odds_repository.write_many([
            OddsRecord(101, Action.STAND, 0.5),
            OddsRecord(101, Action.HIT, -0.25),
            OddsRecord(102, Action.STAND, -1.0),
        ])

        assert odds_repository.exists()
        assert odds_repository.get(Action.STAND, 101) == 0.5
        assert odds_repository.get(Action.HIT, 101) == -0.25
        assert odds_repository.get(Action.DOUBLE, 101) is None
        assert odds_repository.count(Action.STAND) == 2
        assert odds_repository.count(Action.SPLIT) == 0
        odds_repository.close()

    def test_write_before_setup(self, odds_repository):
        with pytest.raises(RuntimeError, match="Call setup"):
            odds_repository.write_many([OddsRecord(1, Action.STAND, 0.0)])


class TestFactory:
    def test_memory_backend(self):
        settings = Settings(storage_backend="memory")

        assert get_storage_backend(settings) == StorageBackend.MEMORY
        assert isinstance(create_stand_cache_store(settings), MemoryStandCacheStore)
        assert isinstance(create_odds_repository(settings), MemoryOddsRepository)

    def test_sqlite_backend(self, tmp_path):
        settings = Settings(
            storage_backend="sqlite",
            stand_cache_path=str(tmp_path / "stand.db"),
        )

        assert isinstance(create_stand_cache_store(settings), SQLiteStandCacheStore)
        assert isinstance(
            create_odds_repository(settings, tmp_path / "odds.db"),
            SQLiteOddsRepository,
        )

    def test_unknown_backend(self):
        settings = Settings().model_copy(update={"storage_backend": "redis"})

        with pytest.raises(ValueError, match="Unsupported storage backend"):
            get_storage_backend(settings)
