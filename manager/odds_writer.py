"""
Batch writer for the odds database.

Walks every player hand and dealer up-card for a rule set and stores
the expected return of each applicable action:
- Stand: always
- Hit: hand value below 21
- Double: also exactly two cards
- Split: also a pair
"""

from typing import Optional

from blackjack.cards import (
    EMPTY_HAND,
    RANKS,
    BLACKJACK,
    Hand,
    card_count,
    cards_left,
    combine,
    hand_value,
    is_pair,
    single_card,
    validate_composition,
)
from blackjack.computer import OddsComputer
from blackjack.encoding import encode_key
from blackjack.hands import generate_player_hands
from blackjack.rules import Action, TableRules
from core.logging import get_logger
from core.storage import BaseOddsRepository, BaseStandCacheStore, OddsRecord
from manager.stand_cache import StandExpectationCache


logger = get_logger(__name__)


class OddsDBWriter:
    """
    Writes expected returns for one rule set and withdrawn composition.

    Usage:
        repository = create_odds_repository(settings, "odds_S8.db")
        writer = OddsDBWriter(rules, repository=repository)
        writer.save_odds()
    """

    def __init__(
        self,
        rules: TableRules,
        repository: BaseOddsRepository,
        withdrawn: Hand = EMPTY_HAND,
        stand_cache: Optional[StandExpectationCache] = None,
        cache_store: Optional[BaseStandCacheStore] = None,
        splits_left: int = 2,
        progress_every: int = 250,
    ):
        """
        Args:
            rules: Table rules
            repository: Destination odds database
            withdrawn: Cards out of the shoe before the hand is dealt
            stand_cache: Loaded stand cache for the same rules and withdrawn cards
            cache_store: Store for building the stand cache when none is given
            splits_left: Resplits allowed when valuing splits
            progress_every: Log progress after this many player hands
        """
        self.rules = rules
        self.withdrawn = validate_composition(withdrawn, "withdrawn", rules.num_decks)
        self._repository = repository
        self._stand_cache = stand_cache
        self._cache_store = cache_store
        self.splits_left = splits_left
        self.progress_every = progress_every

    def save_odds(self) -> bool:
        """
        Compute and store all odds.

        Returns:
            False if the database already exists and was left untouched
        """
        if self._repository.exists():
            logger.info("Odds database already exists, skipping")
            return False

        self._repository.setup()
        try:
            stand_cache = self._get_stand_cache()
            totals = self._write_all(stand_cache)
        finally:
            self._repository.close()

        logger.info(
            "Odds database written",
            table=self.rules.cache_table_name,
            **{action.value.lower(): count for action, count in totals.items()},
        )
        return True

    def _get_stand_cache(self) -> StandExpectationCache:
        if self._stand_cache is None:
            self._stand_cache = StandExpectationCache(
                self.rules, self.withdrawn, store=self._cache_store
            )
        return self._stand_cache.load()

    def _write_all(self, stand_cache: StandExpectationCache) -> dict[Action, int]:
        num_decks = self.rules.num_decks
        computer = OddsComputer(
            self.rules,
            withdrawn=self.withdrawn,
            stand_cache=stand_cache,
        )
        hands = generate_player_hands(num_decks, self.withdrawn)
        totals = {action: 0 for action in Action}

        for index, hand in enumerate(hands, start=1):
            records: list[OddsRecord] = []
            cards_out = combine(hand, self.withdrawn)
            for upcard in range(RANKS):
                if cards_left(num_decks, upcard, cards_out) < 1:
                    continue
                dealer = single_card(upcard)
                computer.player_hand = hand
                computer.dealer_hand = dealer
                key = encode_key(hand, upcard)

                records.append(OddsRecord(key, Action.STAND, stand_cache.get(hand, dealer)))
                if hand_value(hand) >= BLACKJACK:
                    continue
                records.append(OddsRecord(key, Action.HIT, computer.expectation_hit(use_cache=True)))
                if card_count(hand) != 2:
                    continue
                records.append(
                    OddsRecord(key, Action.DOUBLE, computer.expectation_double(use_cache=True))
                )
                if is_pair(hand):
                    records.append(
                        OddsRecord(
                            key,
                            Action.SPLIT,
                            computer.expectation_split(
                                use_cache=True, splits_left=self.splits_left
                            ),
                        )
                    )

            self._repository.write_many(records)
            for record in records:
                totals[record.action] += 1

            if index % self.progress_every == 0:
                logger.info("Odds progress", hands_done=index, hands_total=len(hands))

        return totals
