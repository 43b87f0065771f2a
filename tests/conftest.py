"""
Pytest configuration and fixtures.
"""

import os
import sys
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("STORAGE_BACKEND", "memory")

from blackjack.cards import parse_cards  # noqa: E402
from blackjack.rules import TableRules  # noqa: E402
from core.database import dispose_engines  # noqa: E402


# Player hands closed under hitting: every card drawn to one of these
# either busts or lands on another hand in the list.
CLOSED_HANDS = [
    parse_cards("9,T"),
    parse_cards("A,9,T"),
    parse_cards("2,9,T"),
    parse_cards("A,A,9,T"),
]


def closed_hands(num_decks, withdrawn=None):
    return list(CLOSED_HANDS)


@pytest.fixture
def rules():
    """8 decks, S17, DAS, no RSA, 3:2."""
    return TableRules()


@pytest.fixture
def small_hand_set(monkeypatch):
    """Restrict hand enumeration to CLOSED_HANDS so caches build quickly."""
    monkeypatch.setattr("manager.stand_cache.generate_player_hands", closed_hands)
    monkeypatch.setattr("manager.odds_writer.generate_player_hands", closed_hands)
    return CLOSED_HANDS


@pytest.fixture(autouse=True)
def close_sqlite_engines():
    """Release SQLite files between tests."""
    yield
    dispose_engines()
