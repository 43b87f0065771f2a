"""
Tests for StandExpectationCache.

The small_hand_set fixture keeps builds to four player hands.
"""

import pytest

from blackjack.cards import parse_cards
from blackjack.computer import OddsComputer
from core.storage.memory import MemoryStandCacheStore
from core.storage.sqlite import SQLiteStandCacheStore
from manager.stand_cache import StandCacheMissError, StandExpectationCache


def test_build_covers_every_hand_and_upcard(rules, small_hand_set):
    store = MemoryStandCacheStore()
    cache = StandExpectationCache(rules, store=store).load()

    assert cache.is_loaded
    assert len(cache) == len(small_hand_set) * 10
    assert store.has_table("S8")
    assert store.has_column("S8", "C0_0_0_0_0_0_0_0_0_0")


def test_cached_value_matches_direct_computation(rules, small_hand_set):
    cache = StandExpectationCache(rules, store=MemoryStandCacheStore()).load()
    player, dealer = parse_cards("9,T"), parse_cards("6")

    expected = OddsComputer(rules, player, dealer).expectation_stand()

    assert cache.get(player, dealer) == pytest.approx(expected)


def test_existing_column_is_loaded_not_rebuilt(rules, small_hand_set, monkeypatch):
    store = MemoryStandCacheStore()
    first = StandExpectationCache(rules, store=store).load()

    def fail_build(self):
        raise AssertionError("cache was rebuilt")

    monkeypatch.setattr(StandExpectationCache, "_build", fail_build)
    second = StandExpectationCache(rules, store=store).load()

    player, dealer = parse_cards("A,9,T"), parse_cards("T")
    assert second.get(player, dealer) == first.get(player, dealer)


def test_new_withdrawn_composition_adds_column(rules, small_hand_set):
    store = MemoryStandCacheStore()
    StandExpectationCache(rules, store=store).load()
    withdrawn = parse_cards("5,5")

    cache = StandExpectationCache(rules, withdrawn, store=store).load()

    assert cache.column_name == "C0_0_0_0_2_0_0_0_0_0"
    assert store.has_column("S8", "C0_0_0_0_0_0_0_0_0_0")
    assert store.has_column("S8", "C0_0_0_0_2_0_0_0_0_0")

    player, dealer = parse_cards("9,T"), parse_cards("6")
    expected = OddsComputer(rules, player, dealer, withdrawn).expectation_stand()
    assert cache.get(player, dealer) == pytest.approx(expected)


def test_missing_hand_raises(rules, small_hand_set):
    cache = StandExpectationCache(rules, store=MemoryStandCacheStore()).load()

    with pytest.raises(StandCacheMissError, match="T,T"):
        cache.get(parse_cards("T,T"), parse_cards("6"))


def test_get_before_load(rules):
    cache = StandExpectationCache(rules, store=MemoryStandCacheStore())

    with pytest.raises(RuntimeError, match="Call load"):
        cache.get(parse_cards("9,T"), parse_cards("6"))


def test_cached_hit_and_double_match_uncached(rules, small_hand_set):
    cache = StandExpectationCache(rules, store=MemoryStandCacheStore()).load()
    player, dealer = parse_cards("9,T"), parse_cards("6")

    cached = OddsComputer(rules, player, dealer, stand_cache=cache)
    direct = OddsComputer(rules, player, dealer)

    assert cached.expectation_hit(use_cache=True) == pytest.approx(direct.expectation_hit())
    assert cached.expectation_double(use_cache=True) == pytest.approx(
        direct.expectation_double()
    )


def test_uncached_computer_needs_attached_cache(rules):
    computer = OddsComputer(rules, parse_cards("9,T"), parse_cards("6"))

    with pytest.raises(RuntimeError, match="Stand cache not attached"):
        computer.expectation_hit(use_cache=True)


def test_sqlite_cache_survives_reopen(rules, small_hand_set, tmp_path):
    path = tmp_path / "cacheDB" / "stand_odds.db"
    built = StandExpectationCache(rules, store=SQLiteStandCacheStore(path)).load()

    reloaded = StandExpectationCache(rules, store=SQLiteStandCacheStore(path)).load()

    assert len(reloaded) == len(built)
    for hand in small_hand_set:
        for upcard in ("A", "6", "T"):
            dealer = parse_cards(upcard)
            assert reloaded.get(hand, dealer) == pytest.approx(built.get(hand, dealer))
