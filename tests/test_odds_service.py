"""
Tests for OddsService.
"""

import threading

import pytest

from blackjack.cards import InvalidHandError, parse_cards
from blackjack.rules import Action, TableRules
from core.config import Settings
from manager.odds_service import OddsService


@pytest.fixture
def service():
    return OddsService(Settings(storage_backend="memory"))


@pytest.fixture
def gated_cache(monkeypatch):
    """Stand cache stand-in whose single-deck loads wait for a release."""
    started = threading.Event()
    release = threading.Event()
    loads = []

    class GatedCache:
        def __init__(self, rules, withdrawn, store=None):
            self.rules = rules

        def load(self):
            loads.append(self.rules)
            if self.rules.num_decks == 1:
                started.set()
                release.wait(timeout=5)
            return self

    monkeypatch.setattr("manager.odds_service.StandExpectationCache", GatedCache)
    return started, release, loads


def test_evaluate_pair(service):
    report = service.evaluate(
        parse_cards("8,8"), parse_cards("6"), rules=TableRules(num_decks=1), splits_left=1
    )

    assert set(report.expectations) == set(Action)
    assert report.best_action == Action.SPLIT
    assert report.to_dict()["split"] == report.expectations[Action.SPLIT]


def test_invalid_hand_rejected_before_cache_build(service, monkeypatch):
    def fail_build(*args, **kwargs):
        raise AssertionError("stand cache was built")

    monkeypatch.setattr(service, "get_stand_cache", fail_build)

    with pytest.raises(InvalidHandError, match="bust"):
        service.evaluate(parse_cards("T,T,5"), parse_cards("6"), use_cache=True)
    assert service.loaded_cache_count == 0


def test_slow_build_does_not_block_other_rules(service, gated_cache):
    started, release, loads = gated_cache
    thread = threading.Thread(
        target=service.get_stand_cache, args=(TableRules(num_decks=1),)
    )
    thread.start()
    try:
        assert started.wait(timeout=5)

        service.get_stand_cache(TableRules(num_decks=2))

        # The single-deck build is still waiting
        assert service.loaded_cache_count == 1
    finally:
        release.set()
        thread.join(timeout=5)

    assert service.loaded_cache_count == 2
    assert len(loads) == 2


def test_concurrent_requests_share_one_build(service, gated_cache):
    started, release, loads = gated_cache
    rules = TableRules(num_decks=1)
    results = []

    def fetch():
        results.append(service.get_stand_cache(rules))

    threads = [threading.Thread(target=fetch) for _ in range(2)]
    threads[0].start()
    assert started.wait(timeout=5)
    threads[1].start()
    release.set()
    for thread in threads:
        thread.join(timeout=5)

    assert len(loads) == 1
    assert len(results) == 2
    assert results[0] is results[1]
