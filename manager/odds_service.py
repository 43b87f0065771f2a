"""
Odds service - evaluates game situations for the API and scripts.

Keeps loaded stand caches per (rules, withdrawn cards) so repeated
requests under the same rules only pay for the cache build once.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from blackjack.cards import (
    EMPTY_HAND,
    BLACKJACK,
    Hand,
    card_count,
    dealer_upcard,
    hand_value,
    is_pair,
)
from blackjack.computer import OddsComputer
from blackjack.encoding import encode_key
from blackjack.rules import Action, TableRules
from core.config import Settings
from core.logging import get_logger
from core.storage import create_stand_cache_store
from manager.stand_cache import StandExpectationCache


logger = get_logger(__name__)


@dataclass
class OddsReport:
    """Expected returns of the actions available in one situation."""
    key: int
    expectations: dict[Action, float] = field(default_factory=dict)

    @property
    def best_action(self) -> Action:
        return max(self.expectations, key=self.expectations.__getitem__)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "best_action": self.best_action.value,
            **{action.value.lower(): self.expectations.get(action) for action in Action},
        }


class OddsService:
    """
    Entry point for odds evaluation.

    - Builds or loads stand caches on demand
    - Decides which actions apply to a hand
    - Runs the computer and collects an OddsReport
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._caches: dict[tuple[TableRules, Hand], StandExpectationCache] = {}
        # Guards the two dicts; builds hold only the lock of their own key
        self._lock = threading.Lock()
        self._build_locks: dict[tuple[TableRules, Hand], threading.Lock] = {}

    @property
    def default_rules(self) -> TableRules:
        return self.settings.default_rules

    @property
    def loaded_cache_count(self) -> int:
        return len(self._caches)

    def get_stand_cache(
        self,
        rules: TableRules,
        withdrawn: Hand = EMPTY_HAND,
    ) -> StandExpectationCache:
        """Get the loaded stand cache for a rule set, building it if needed."""
        key = (rules, tuple(withdrawn))
        with self._lock:
            cache = self._caches.get(key)
            if cache is not None:
                return cache
            build_lock = self._build_locks.setdefault(key, threading.Lock())

        with build_lock:
            with self._lock:
                cache = self._caches.get(key)
            if cache is not None:
                return cache

            logger.info(
                "Loading stand cache",
                table=rules.cache_table_name,
                backend=self.settings.storage_backend,
            )
            cache = StandExpectationCache(
                rules,
                withdrawn,
                store=create_stand_cache_store(self.settings),
            ).load()
            with self._lock:
                self._caches[key] = cache
            return cache

    def evaluate(
        self,
        player_hand: Hand,
        dealer_hand: Hand,
        withdrawn: Hand = EMPTY_HAND,
        rules: Optional[TableRules] = None,
        use_cache: bool = False,
        splits_left: Optional[int] = None,
    ) -> OddsReport:
        """
        Compute the expected return of every action available to the player.

        Stand is always evaluated (after the dealer's peek). Hit needs a
        hand below 21, double also needs exactly two cards, split also
        needs a pair.
        """
        rules = rules or self.default_rules
        splits_left = self.settings.max_splits if splits_left is None else splits_left

        computer = OddsComputer(rules, player_hand, dealer_hand, withdrawn)
        # Validates the situation before any cache build
        stand = computer.expectation_stand(after_peek=True)
        report = OddsReport(
            key=encode_key(computer.player_hand, dealer_upcard(computer.dealer_hand))
        )
        report.expectations[Action.STAND] = stand
        if use_cache:
            computer.stand_cache = self.get_stand_cache(rules, withdrawn)

        if hand_value(computer.player_hand) < BLACKJACK:
            report.expectations[Action.HIT] = computer.expectation_hit(use_cache)
            if card_count(computer.player_hand) == 2:
                report.expectations[Action.DOUBLE] = computer.expectation_double(use_cache)
                if is_pair(computer.player_hand):
                    report.expectations[Action.SPLIT] = computer.expectation_split(
                        use_cache, splits_left
                    )

        logger.debug(
            "Situation evaluated",
            key=report.key,
            best_action=report.best_action.value,
            use_cache=use_cache,
        )
        return report
