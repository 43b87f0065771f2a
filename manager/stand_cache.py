"""
Stand expectation cache.

Standing is the leaf of every hit, double and split evaluation, so the
expected return of standing is precomputed once for every player hand
and dealer up-card under a rule set and a composition of withdrawn
cards. Values live in the stand cache store: one table per rule set,
one column per withdrawn composition. load() reads the column when it
exists and builds it otherwise.
"""

from typing import Optional

from blackjack.cards import (
    EMPTY_HAND,
    RANKS,
    Hand,
    cards_left,
    combine,
    dealer_upcard,
    format_hand,
    single_card,
    validate_composition,
)
from blackjack.computer import OddsComputer
from blackjack.encoding import encode_key, stand_column_name
from blackjack.hands import generate_player_hands
from blackjack.rules import TableRules
from core.config import settings
from core.logging import get_logger
from core.storage import BaseStandCacheStore, create_stand_cache_store


logger = get_logger(__name__)


class StandCacheMissError(KeyError):
    """No cached stand value for a (player hand, dealer up-card) pair."""
    pass


class StandExpectationCache:
    """
    Stand expectations for one rule set and one withdrawn composition.

    Usage:
        cache = StandExpectationCache(rules, withdrawn).load()
        computer = OddsComputer(rules, player, dealer, withdrawn, stand_cache=cache)
        computer.expectation_hit(use_cache=True)
    """

    def __init__(
        self,
        rules: TableRules,
        withdrawn: Hand = EMPTY_HAND,
        store: Optional[BaseStandCacheStore] = None,
    ):
        """
        Args:
            rules: Table rules
            withdrawn: Cards out of the shoe before the hand is dealt
            store: Backing store (default from settings)
        """
        self.rules = rules
        self.withdrawn = validate_composition(withdrawn, "withdrawn", rules.num_decks)
        self._store = store
        self._values: dict[int, float] = {}
        self._loaded = False

    @property
    def table_name(self) -> str:
        return self.rules.cache_table_name

    @property
    def column_name(self) -> str:
        return stand_column_name(self.withdrawn)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def __len__(self) -> int:
        return len(self._values)

    def load(self) -> "StandExpectationCache":
        """
        Load cached values from the store, computing and storing them if absent.

        Returns:
            self, for chaining
        """
        if self._loaded:
            return self

        if self._store is None:
            self._store = create_stand_cache_store(settings)
        self._store.setup()

        table, column = self.table_name, self.column_name
        if not self._store.has_table(table):
            logger.info("Stand cache table not found, creating", table=table)
            self._store.create_table(table, self._all_keys())
            self._build()
        elif self._store.has_column(table, column):
            self._values = self._store.load_column(table, column)
        else:
            logger.info(
                "Stand cache column not found, creating",
                table=table,
                column=column,
            )
            self._build()

        self._loaded = True
        logger.info(
            "Stand cache loaded",
            table=table,
            column=column,
            entries=len(self._values),
        )
        return self

    def get(self, player_hand: Hand, dealer_hand: Hand) -> float:
        """Cached expected return of standing on player_hand against the up-card."""
        if not self._loaded:
            raise RuntimeError("Stand cache not loaded. Call load() first.")
        key = encode_key(player_hand, dealer_upcard(dealer_hand))
        try:
            return self._values[key]
        except KeyError:
            raise StandCacheMissError(
                f"No stand value for player {format_hand(player_hand)} "
                f"against dealer {format_hand(dealer_hand)} "
                f"in {self.table_name}.{self.column_name}"
            ) from None

    def _all_keys(self) -> list[int]:
        # Rows cover every pair reachable from a full shoe so that later
        # withdrawn compositions only need a new column
        num_decks = self.rules.num_decks
        return [
            encode_key(hand, upcard)
            for hand in generate_player_hands(num_decks, EMPTY_HAND)
            for upcard in range(RANKS)
            if cards_left(num_decks, upcard, hand) >= 1
        ]

    def _build(self) -> None:
        num_decks = self.rules.num_decks
        computer = OddsComputer(self.rules, withdrawn=self.withdrawn)
        hands = generate_player_hands(num_decks, self.withdrawn)
        logger.info(
            "Computing stand expectations",
            table=self.table_name,
            column=self.column_name,
            hands=len(hands),
        )

        values: dict[int, float] = {}
        for hand in hands:
            cards_out = combine(hand, self.withdrawn)
            for upcard in range(RANKS):
                if cards_left(num_decks, upcard, cards_out) < 1:
                    continue
                computer.player_hand = hand
                computer.dealer_hand = single_card(upcard)
                values[encode_key(hand, upcard)] = computer.expectation_stand(after_peek=True)
            # Dealer subtrees are specific to the player hand
            computer.clear_memo()

        self._store.write_column(self.table_name, self.column_name, values)
        self._values = values
