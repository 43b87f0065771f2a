"""
Table rules and player actions.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Action(str, Enum):
    """
    Player actions whose expected return is computed.

    Values double as table names in the odds database.
    """
    STAND = "Stand"
    HIT = "Hit"
    DOUBLE = "Double"
    SPLIT = "Split"


class TableRules(BaseModel):
    """
    Rules of a blackjack table.

    Immutable so that rule sets can key caches.
    """

    model_config = ConfigDict(frozen=True)

    num_decks: int = Field(
        default=8,
        ge=1,
        description="Number of 52-card decks in the shoe",
    )
    dealer_stands_soft_17: bool = Field(
        default=True,
        description="S17 when true, H17 when false",
    )
    double_after_split: bool = Field(
        default=True,
        description="Whether a split hand may be doubled",
    )
    ace_resplits: bool = Field(
        default=False,
        description="Whether a pair formed after splitting aces may be split again",
    )
    blackjack_pays: float = Field(
        default=1.5,
        gt=0,
        description="Payout of a natural blackjack per unit bet (1.5 for 3:2)",
    )

    @property
    def cache_table_name(self) -> str:
        """Stand cache table for these rules, e.g. 'S8' or 'H6'."""
        return f"{'S' if self.dealer_stands_soft_17 else 'H'}{self.num_decks}"
