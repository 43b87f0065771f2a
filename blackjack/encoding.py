"""
Integer keys for (player hand, dealer up-card) pairs.

Rank counts are packed as base-23 digits (a hand with hard total
at most 21 never holds 23 cards of one rank), then shifted one
decimal place to make room for the dealer's up-card.
"""

from blackjack.cards import EMPTY_HAND, RANKS, Hand, single_card

_BASE = 23


def encode_key(player_hand: Hand, dealer_card: int) -> int:
    code = 0
    for rank in range(RANKS - 1, -1, -1):
        code = _BASE * code + player_hand[rank]
    return RANKS * code + dealer_card


def decode_player(code: int) -> Hand:
    code //= RANKS
    hand = []
    for _ in range(RANKS):
        hand.append(code % _BASE)
        code //= _BASE
    return tuple(hand)


def decode_dealer(code: int) -> Hand:
    return single_card(code % RANKS)


def stand_column_name(withdrawn: Hand = EMPTY_HAND) -> str:
    """Stand cache column for a withdrawn composition, e.g. 'C0_0_1_0_0_0_0_0_0_2'."""
    return "C" + "_".join(str(count) for count in withdrawn)
