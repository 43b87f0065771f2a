"""
Blackjack odds: card arithmetic, table rules, hand enumeration
and the expected-return computer.
"""

from blackjack.cards import (
    BlackjackError,
    EMPTY_HAND,
    Hand,
    InvalidHandError,
    format_hand,
    parse_cards,
)
from blackjack.computer import OddsComputer
from blackjack.encoding import encode_key
from blackjack.hands import generate_player_hands
from blackjack.rules import Action, TableRules

__all__ = [
    "Action",
    "BlackjackError",
    "EMPTY_HAND",
    "Hand",
    "InvalidHandError",
    "OddsComputer",
    "TableRules",
    "encode_key",
    "format_hand",
    "generate_player_hands",
    "parse_cards",
]
