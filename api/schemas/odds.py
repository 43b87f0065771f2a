"""
Odds request and response schemas.

These Pydantic models define the API contract and provide
automatic validation and documentation.
"""

from typing import Optional

from pydantic import BaseModel, Field

from blackjack.rules import TableRules


class OddsRequest(BaseModel):
    """Request body for evaluating a game situation."""

    player_cards: list[str] = Field(
        ...,
        min_length=1,
        description="Player's cards as labels: A, 2-9, T (10, J, Q, K accepted)",
        examples=[["7", "7"]],
    )
    dealer_card: str = Field(
        ...,
        description="Dealer's up-card",
        examples=["9"],
    )
    withdrawn_cards: list[str] = Field(
        default_factory=list,
        description="Cards already out of the shoe and in neither hand",
    )
    rules: Optional[TableRules] = Field(
        default=None,
        description="Table rules; the service defaults apply when omitted",
    )
    use_cache: bool = Field(
        default=False,
        description="Use the stand expectation cache (built on first use)",
    )
    splits_left: Optional[int] = Field(
        default=None,
        ge=0,
        le=3,
        description="Resplits allowed when valuing a split",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "player_cards": ["7", "7"],
                    "dealer_card": "9",
                    "rules": {
                        "num_decks": 8,
                        "dealer_stands_soft_17": True,
                        "double_after_split": True,
                        "ace_resplits": False,
                        "blackjack_pays": 1.5,
                    },
                }
            ]
        }
    }


class OddsResponse(BaseModel):
    """Expected returns in units of the initial bet."""

    key: int = Field(..., description="Hash key of the (player hand, up-card) pair")
    player_hand: str
    dealer_card: str
    rules: TableRules
    stand: float
    hit: Optional[float] = Field(default=None, description="Absent when the hand is 21")
    double: Optional[float] = Field(default=None, description="Only for two-card hands")
    split: Optional[float] = Field(default=None, description="Only for pairs")
    best_action: str
