"""
Card constants and hand arithmetic.

Hands are compositions: a tuple with one count per rank, ace first and
the ten-valued group (10, J, Q, K) last. The order in which cards were
drawn never matters for blackjack odds, so compositions are all we keep.
"""

from typing import Iterable, Optional

Hand = tuple[int, ...]

RANKS = 10
ACE = 0
TEN = 9

CARD_VALUES: tuple[int, ...] = (1, 2, 3, 4, 5, 6, 7, 8, 9, 10)
# Cards of each rank in a single 52-card deck
OCCURRENCES: tuple[int, ...] = (4, 4, 4, 4, 4, 4, 4, 4, 4, 16)
DECK_SIZE = 52

BLACKJACK = 21

RANK_LABELS: tuple[str, ...] = ("A", "2", "3", "4", "5", "6", "7", "8", "9", "T")
_LABEL_ALIASES = {"10": TEN, "J": TEN, "Q": TEN, "K": TEN, "1": ACE}

EMPTY_HAND: Hand = (0,) * RANKS


def hard_total(hand: Hand) -> int:
    """Sum of face values, counting aces as 1."""
    return sum(value * count for value, count in zip(CARD_VALUES, hand))


def hand_value(hand: Hand) -> int:
    """Best value of the hand: one ace counts 11 when that does not bust."""
    total = hard_total(hand)
    if total <= 11 and hand[ACE] > 0:
        total += 10
    return total


def is_soft(hand: Hand) -> bool:
    return hard_total(hand) <= 11 and hand[ACE] > 0


def card_count(hand: Hand) -> int:
    return sum(hand)


def is_pair(hand: Hand) -> bool:
    return card_count(hand) == 2 and 2 in hand


def is_blackjack(hand: Hand) -> bool:
    return card_count(hand) == 2 and hand_value(hand) == BLACKJACK


def single_card(rank: int) -> Hand:
    hand = [0] * RANKS
    hand[rank] = 1
    return tuple(hand)


def add_card(hand: Hand, rank: int) -> Hand:
    """Return a new hand with one more card of the given rank."""
    return hand[:rank] + (hand[rank] + 1,) + hand[rank + 1:]


def combine(*groups: Hand) -> Hand:
    """Per-rank sum of several groups of cards."""
    return tuple(sum(counts) for counts in zip(*groups))


def cards_left(num_decks: int, rank: int, cards_out: Hand) -> int:
    """Cards of the given rank still in the shoe."""
    return num_decks * OCCURRENCES[rank] - cards_out[rank]


def shoe_size(num_decks: int, cards_out: Hand) -> int:
    return num_decks * DECK_SIZE - card_count(cards_out)


def dealer_upcard(dealer_hand: Hand) -> int:
    """Rank of the dealer's single up-card."""
    if card_count(dealer_hand) != 1:
        raise InvalidHandError(
            f"Dealer hand must hold exactly one card, got {format_hand(dealer_hand)}"
        )
    return dealer_hand.index(1)


def parse_rank(label: str) -> int:
    label = label.strip().upper()
    if label in _LABEL_ALIASES:
        return _LABEL_ALIASES[label]
    try:
        return RANK_LABELS.index(label)
    except ValueError:
        raise InvalidHandError(f"Unknown card: {label!r}") from None


def parse_cards(labels: Iterable[str] | str) -> Hand:
    """
    Build a hand from card labels.

    Accepts an iterable of labels or a comma separated string,
    e.g. ["A", "T"] or "7,7". Ten-valued cards may be written
    as T, 10, J, Q or K.
    """
    if isinstance(labels, str):
        labels = [part for part in labels.split(",") if part.strip()]
    hand = EMPTY_HAND
    for label in labels:
        hand = add_card(hand, parse_rank(label))
    return hand


def format_hand(hand: Hand) -> str:
    return ",".join(
        label for label, count in zip(RANK_LABELS, hand) for _ in range(count)
    )


def validate_composition(
    hand: Hand,
    name: str = "hand",
    num_decks: Optional[int] = None,
) -> Hand:
    """Check shape and counts of a composition, returning it as a tuple."""
    hand = tuple(hand)
    if len(hand) != RANKS:
        raise InvalidHandError(f"{name} must have {RANKS} rank counts, got {len(hand)}")
    if any(count < 0 for count in hand):
        raise InvalidHandError(f"{name} has negative counts: {hand}")
    if num_decks is not None:
        for rank, count in enumerate(hand):
            if count > num_decks * OCCURRENCES[rank]:
                raise InvalidHandError(
                    f"{name} holds {count} x {RANK_LABELS[rank]}, "
                    f"more than {num_decks} deck(s) contain"
                )
    return hand


class BlackjackError(Exception):
    """Base exception for blackjack computations."""
    pass


class InvalidHandError(BlackjackError, ValueError):
    """A hand or card composition cannot be evaluated."""
    pass
