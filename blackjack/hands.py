"""
Enumeration of every player hand that can occur at the table.
"""

from typing import Optional

from blackjack.cards import (
    BLACKJACK,
    CARD_VALUES,
    EMPTY_HAND,
    RANKS,
    Hand,
    add_card,
    cards_left,
)


def generate_player_hands(num_decks: int, withdrawn: Optional[Hand] = None) -> list[Hand]:
    """
    List all player hands for a shoe.

    A hand qualifies when it holds at least two cards, its hard total
    (aces counted as 1) is at most 21, and the shoe still holds every
    card in it once the withdrawn cards are taken out.

    Args:
        num_decks: Decks in the shoe
        withdrawn: Cards already removed from the shoe

    Returns:
        Compositions in depth-first order, ranks filled lowest first
    """
    withdrawn = withdrawn or EMPTY_HAND
    hands: list[Hand] = []

    def extend(hand: Hand, total: int, start: int, size: int) -> None:
        for rank in range(start, RANKS):
            # Face values increase with rank, so no later rank fits either
            if total + CARD_VALUES[rank] > BLACKJACK:
                break
            if cards_left(num_decks, rank, withdrawn) <= hand[rank]:
                continue
            new_hand = add_card(hand, rank)
            if size + 1 >= 2:
                hands.append(new_hand)
            extend(new_hand, total + CARD_VALUES[rank], rank, size + 1)

    extend(EMPTY_HAND, 0, 0, 0)
    return hands
