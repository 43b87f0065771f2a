"""
Exact expected returns of blackjack actions.

Given the table rules, the player's hand, the dealer's hand and the
cards already withdrawn from the shoe, OddsComputer evaluates standing,
hitting and doubling exactly by recursing over every card the shoe can
still deal. Splitting is approximated by treating the two split hands
as independent.

Expectations are in units of the initial bet. A win pays 1, a loss
costs 1 and a natural blackjack pays rules.blackjack_pays.
"""

from typing import TYPE_CHECKING, Optional

from blackjack.cards import (
    ACE,
    EMPTY_HAND,
    RANKS,
    TEN,
    BLACKJACK,
    Hand,
    RANK_LABELS,
    InvalidHandError,
    add_card,
    card_count,
    cards_left,
    combine,
    format_hand,
    hand_value,
    is_blackjack,
    is_pair,
    is_soft,
    shoe_size,
    single_card,
    validate_composition,
)
from blackjack.rules import TableRules

if TYPE_CHECKING:
    from manager.stand_cache import StandExpectationCache


def hole_card_exclusion(dealer_hand: Hand) -> Optional[int]:
    """
    Rank the dealer's hole card cannot be once the dealer has peeked.

    A dealer showing a ten or an ace checks for blackjack before play
    continues, so if the hand is still live the hole card is not the
    complementary rank.
    """
    if card_count(dealer_hand) != 1:
        return None
    if dealer_hand[TEN] == 1:
        return ACE
    if dealer_hand[ACE] == 1:
        return TEN
    return None


def stand_probabilities(
    num_decks: int,
    cards_out: Hand,
    excluded: Optional[int] = None,
) -> list[float]:
    """
    Distribution of the next card the dealer turns over.

    With an excluded rank, that rank has probability zero and the others
    are renormalised over the rest of the shoe.
    All zeros when the shoe has no card the dealer can turn over.
    """
    total = shoe_size(num_decks, cards_out)
    result = [0.0] * RANKS
    if excluded is not None:
        remaining = total - cards_left(num_decks, excluded, cards_out)
        if remaining < 1:
            return result
        for rank in range(RANKS):
            if rank == excluded:
                continue
            result[rank] = cards_left(num_decks, rank, cards_out) / remaining
    elif total > 0:
        for rank in range(RANKS):
            result[rank] = cards_left(num_decks, rank, cards_out) / total
    return result


def draw_probabilities(
    num_decks: int,
    cards_out: Hand,
    excluded: Optional[int] = None,
) -> list[float]:
    """
    Distribution of the next card the player draws.

    The dealer's hole card is still face down, but once the dealer has
    peeked it is known not to be the excluded rank, which shifts weight
    towards that rank in the rest of the shoe.
    All zeros when no card is left for the player.
    """
    total = shoe_size(num_decks, cards_out)
    result = [0.0] * RANKS
    if excluded is not None:
        hole = cards_left(num_decks, excluded, cards_out)
        if total < 2 or total == hole:
            # No card left for the player beside a valid hole card
            return result
        for rank in range(RANKS):
            # P(next card = rank | hole card is not the excluded rank)
            if rank == excluded:
                result[rank] = hole / (total - 1)
            else:
                result[rank] = (
                    cards_left(num_decks, rank, cards_out)
                    * (total - hole - 1)
                    / (total - 1)
                    / (total - hole)
                )
    elif total > 0:
        for rank in range(RANKS):
            result[rank] = cards_left(num_decks, rank, cards_out) / total
    return result


class OddsComputer:
    """
    Expected return of each action for one game situation.

    Values computed along the way are memoised per instance, keyed by
    the hands involved, so one computer can be reused across many
    situations with the same rules (as the stand cache and the batch
    writer do by reassigning player_hand and dealer_hand).

    Usage:
        computer = OddsComputer(rules, parse_cards("7,7"), parse_cards("9"))
        computer.expectation_stand()
        computer.stand_cache = StandExpectationCache(rules).load()
        computer.expectation_split(use_cache=True)
    """

    def __init__(
        self,
        rules: TableRules,
        player_hand: Hand = EMPTY_HAND,
        dealer_hand: Hand = EMPTY_HAND,
        withdrawn: Hand = EMPTY_HAND,
        stand_cache: Optional["StandExpectationCache"] = None,
    ):
        """
        Args:
            rules: Table rules
            player_hand: Player's composition
            dealer_hand: Dealer's composition, normally the up-card alone
            withdrawn: Cards out of the shoe that are in neither hand
            stand_cache: Precomputed stand values; must have been built
                for the same rules and withdrawn cards
        """
        self.rules = rules
        self.player_hand = tuple(player_hand)
        self.dealer_hand = tuple(dealer_hand)
        self.withdrawn = tuple(withdrawn)
        self.stand_cache = stand_cache

        self._stand_memo: dict[tuple, float] = {}
        self._hit_memo: dict[tuple, float] = {}

    # =========================================
    # Public API
    # =========================================

    def expectation_stand(self, after_peek: bool = True, natural: bool = True) -> float:
        """
        Expected return after the player stands.

        Args:
            after_peek: Whether the dealer has already checked for blackjack
            natural: Whether a two-card 21 is a blackjack; False for a
                hand formed by splitting

        Returns:
            Expected return upon standing
        """
        self._check_situation(peeked=after_peek)
        return self._stand(self.player_hand, self.dealer_hand, after_peek, natural)

    def expectation_hit(self, use_cache: bool = False) -> float:
        """
        Expected return after the player hits and then plays on optimally.

        Args:
            use_cache: Read stand values from the stand cache

        Returns:
            Expected return upon hitting
        """
        self._check_situation(cards_drawn=1)
        return self._hit(self.player_hand, self.dealer_hand, use_cache)

    def expectation_double(self, use_cache: bool = False) -> float:
        """
        Expected return after the player doubles: one card, twice the stake.

        Args:
            use_cache: Read stand values from the stand cache

        Returns:
            Expected return upon doubling
        """
        self._check_situation(cards_drawn=1)
        return self._double(self.player_hand, self.dealer_hand, use_cache)

    def expectation_split(self, use_cache: bool = False, splits_left: int = 2) -> float:
        """
        Approximate expected return after the player splits a pair.

        An exact composition-dependent split is infeasible; the two hands
        are valued independently of each other.

        Args:
            use_cache: Read stand values from the stand cache
            splits_left: How many further resplits the table allows

        Returns:
            Expected return upon splitting
        """
        self._check_situation(cards_drawn=2)
        if not is_pair(self.player_hand):
            raise InvalidHandError(
                f"Only a pair can be split, got {format_hand(self.player_hand)}"
            )
        if splits_left < 0:
            raise ValueError(f"splits_left must be non-negative, got {splits_left}")
        if self.player_hand[ACE] == 2 and not self.rules.ace_resplits:
            splits_left = 0

        # Value with n resplits left depends on values with fewer left
        split_values: list[float] = []
        for remaining in range(splits_left + 1):
            split_values.append(self._split(use_cache, remaining, split_values))
        return split_values[splits_left]

    def clear_memo(self) -> None:
        """Forget memoised values, e.g. between player hands in a batch."""
        self._stand_memo.clear()
        self._hit_memo.clear()

    # =========================================
    # Stand
    # =========================================

    def _stand(
        self,
        player: Hand,
        dealer: Hand,
        after_peek: bool,
        natural: bool = True,
    ) -> float:
        key = (player, dealer, self.withdrawn, after_peek, natural)
        cached = self._stand_memo.get(key)
        if cached is not None:
            return cached

        num_decks = self.rules.num_decks
        payout = self.rules.blackjack_pays
        cards_out = combine(player, dealer, self.withdrawn)
        excluded = hole_card_exclusion(dealer) if after_peek else None
        probabilities = stand_probabilities(num_decks, cards_out, excluded)

        dealer_value = hand_value(dealer)
        player_value = hand_value(player)
        player_blackjack = natural and is_blackjack(player)

        result = 0.0
        if dealer_value <= 16 or (
            dealer_value == 17
            and is_soft(dealer)
            and not self.rules.dealer_stands_soft_17
        ):
            # Dealer hits
            for rank in range(RANKS):
                if cards_left(num_decks, rank, cards_out) < 1 or rank == excluded:
                    continue
                new_dealer = add_card(dealer, rank)
                if hand_value(new_dealer) <= BLACKJACK:
                    result += probabilities[rank] * self._stand(
                        player, new_dealer, after_peek, natural
                    )
                elif player_blackjack:
                    result += payout * probabilities[rank]
                else:
                    result += probabilities[rank]
        else:
            # Dealer stands
            if player_blackjack and not is_blackjack(dealer):
                result = payout
            elif dealer_value < player_value:
                result = 1.0
            elif dealer_value > player_value or (
                is_blackjack(dealer) and not player_blackjack
            ):
                result = -1.0

        self._stand_memo[key] = result
        return result

    def _stand_value(self, player: Hand, dealer: Hand, use_cache: bool) -> float:
        if use_cache:
            if self.stand_cache is None:
                raise RuntimeError(
                    "Stand cache not attached. Set stand_cache before using cached values."
                )
            return self.stand_cache.get(player, dealer)
        return self._stand(player, dealer, True)

    # =========================================
    # Hit and double
    # =========================================

    def _hit(self, player: Hand, dealer: Hand, use_cache: bool) -> float:
        key = (player, dealer, self.withdrawn, use_cache)
        cached = self._hit_memo.get(key)
        if cached is not None:
            return cached

        num_decks = self.rules.num_decks
        cards_out = combine(player, dealer, self.withdrawn)
        probabilities = draw_probabilities(
            num_decks, cards_out, hole_card_exclusion(dealer)
        )

        result = 0.0
        for rank in range(RANKS):
            if cards_left(num_decks, rank, cards_out) < 1:
                continue
            new_player = add_card(player, rank)
            value = hand_value(new_player)
            if value <= 11:
                result += probabilities[rank] * self._hit(new_player, dealer, use_cache)
            elif value <= BLACKJACK:
                hit = self._hit(new_player, dealer, use_cache)
                stand = self._stand_value(new_player, dealer, use_cache)
                result += probabilities[rank] * max(hit, stand)
            else:
                result -= probabilities[rank]

        self._hit_memo[key] = result
        return result

    def _double(self, player: Hand, dealer: Hand, use_cache: bool) -> float:
        num_decks = self.rules.num_decks
        cards_out = combine(player, dealer, self.withdrawn)
        probabilities = draw_probabilities(
            num_decks, cards_out, hole_card_exclusion(dealer)
        )

        result = 0.0
        for rank in range(RANKS):
            if cards_left(num_decks, rank, cards_out) < 1:
                continue
            new_player = add_card(player, rank)
            if hand_value(new_player) <= BLACKJACK:
                result += 2 * probabilities[rank] * self._stand_value(
                    new_player, dealer, use_cache
                )
            else:
                result -= 2 * probabilities[rank]
        return result

    # =========================================
    # Split
    # =========================================

    def _split(self, use_cache: bool, splits_left: int, split_values: list[float]) -> float:
        num_decks = self.rules.num_decks
        dealer = self.dealer_hand
        pair = self.player_hand.index(2)
        split_aces = pair == ACE
        base = single_card(pair)

        excluded = hole_card_exclusion(dealer)
        cards_out = combine(self.player_hand, dealer, self.withdrawn)
        first_probabilities = draw_probabilities(num_decks, cards_out, excluded)

        result = 0.0
        for first in range(RANKS):
            if cards_left(num_decks, first, cards_out) < 1:
                continue
            hand1 = add_card(base, first)
            cards_out2 = add_card(cards_out, first)
            second_probabilities = draw_probabilities(num_decks, cards_out2, excluded)
            for second in range(RANKS):
                if cards_left(num_decks, second, cards_out2) < 1:
                    continue
                hand2 = add_card(base, second)

                if splits_left == 0 or (first != pair and second != pair):
                    value = self._pair_distinct(hand1, hand2, split_aces, use_cache)
                elif splits_left >= 2 and first == pair and second == pair:
                    value = self._pair_two_equal(
                        hand1, hand2, split_aces, use_cache, splits_left, split_values
                    )
                elif first == pair:
                    value = self._pair_one_equal(
                        hand1, hand2, split_aces, use_cache, splits_left, split_values
                    )
                else:
                    value = self._pair_one_equal(
                        hand2, hand1, split_aces, use_cache, splits_left, split_values
                    )

                result += first_probabilities[first] * second_probabilities[second] * value
        return result

    def _pair_two_equal(
        self,
        hand1: Hand,
        hand2: Hand,
        split_aces: bool,
        use_cache: bool,
        splits_left: int,
        split_values: list[float],
    ) -> float:
        # Both hands paired again: keep both, resplit one, or resplit both
        keep = self._pair_distinct(hand1, hand2, split_aces, use_cache)
        resplit_one = split_values[splits_left - 1] + self._normal_play(
            hand2, split_aces, use_cache
        )
        resplit_both = 2 * split_values[splits_left - 2]
        return max(keep, resplit_one, resplit_both)

    def _pair_one_equal(
        self,
        paired_hand: Hand,
        other_hand: Hand,
        split_aces: bool,
        use_cache: bool,
        splits_left: int,
        split_values: list[float],
    ) -> float:
        keep = self._pair_distinct(paired_hand, other_hand, split_aces, use_cache)
        resplit = split_values[splits_left - 1] + self._normal_play(
            other_hand, split_aces, use_cache
        )
        return max(keep, resplit)

    def _pair_distinct(
        self,
        hand1: Hand,
        hand2: Hand,
        split_aces: bool,
        use_cache: bool,
    ) -> float:
        # Returns of the two hands are treated as independent, which
        # they are not quite: each hand's cards leave the other's shoe.
        return (
            self._normal_play(hand1, split_aces, use_cache)
            + self._normal_play(hand2, split_aces, use_cache)
        )

    def _normal_play(self, hand: Hand, split_aces: bool, use_cache: bool) -> float:
        """
        Value of one split hand played on its own.

        A two-card 21 here is an ordinary 21 for every pair, not only
        aces: it pays 1 and pushes a dealer 21.
        """
        dealer = self.dealer_hand
        if is_blackjack(hand):
            # Not in the stand cache, which holds naturals
            stand = self._stand(hand, dealer, True, natural=False)
        else:
            stand = self._stand_value(hand, dealer, use_cache)
        if split_aces:
            # Split aces receive one card only
            return stand

        hit = self._hit(hand, dealer, use_cache)
        if self.rules.double_after_split:
            return max(stand, hit, self._double(hand, dealer, use_cache))
        return max(stand, hit)

    # =========================================
    # Validation
    # =========================================

    def _check_situation(self, cards_drawn: int = 0, peeked: bool = True) -> None:
        """
        Validate the hands and that the shoe can deal what the action needs:
        cards_drawn cards for the player plus the dealer's next card.
        """
        num_decks = self.rules.num_decks
        self.player_hand = validate_composition(self.player_hand, "player_hand", num_decks)
        self.dealer_hand = validate_composition(self.dealer_hand, "dealer_hand", num_decks)
        self.withdrawn = validate_composition(self.withdrawn, "withdrawn", num_decks)
        cards_out = combine(self.player_hand, self.dealer_hand, self.withdrawn)
        validate_composition(cards_out, "cards out", num_decks)
        if card_count(self.player_hand) == 0:
            raise InvalidHandError("Player hand is empty")
        if card_count(self.dealer_hand) == 0:
            raise InvalidHandError("Dealer hand is empty")
        if hand_value(self.player_hand) > BLACKJACK:
            raise InvalidHandError(
                f"Player hand {format_hand(self.player_hand)} is bust"
            )

        total = shoe_size(num_decks, cards_out)
        if total < cards_drawn + 1:
            raise InvalidHandError(
                f"Shoe has {total} card(s) left, {cards_drawn + 1} needed"
            )
        excluded = hole_card_exclusion(self.dealer_hand) if peeked else None
        if excluded is not None and total == cards_left(num_decks, excluded, cards_out):
            raise InvalidHandError(
                f"Shoe has no card the hole card can be after the dealer "
                f"peeked: only {RANK_LABELS[excluded]} left"
            )
