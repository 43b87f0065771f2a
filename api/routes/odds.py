"""
Odds endpoints.

- GET /api/v1/odds/rules - Default table rules
- POST /api/v1/odds - Expected returns for a game situation
"""

import asyncio

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_odds_service
from api.schemas.odds import OddsRequest, OddsResponse
from blackjack.cards import InvalidHandError, format_hand, parse_cards
from blackjack.rules import TableRules
from core.logging import get_logger
from manager.odds_service import OddsService


logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/odds", tags=["Odds"])


@router.get("/rules", response_model=TableRules)
async def get_default_rules(
    service: OddsService = Depends(get_odds_service),
) -> TableRules:
    """Table rules applied when a request does not specify any."""
    return service.default_rules


@router.post("", response_model=OddsResponse)
async def evaluate_situation(
    request: OddsRequest,
    service: OddsService = Depends(get_odds_service),
) -> OddsResponse:
    """
    Compute the expected return of each available action.

    The computation is CPU bound and runs in a worker thread. With
    use_cache the first request under a rule set builds the stand
    cache, which takes a while.
    """
    rules = request.rules or service.default_rules
    try:
        player = parse_cards(request.player_cards)
        dealer = parse_cards([request.dealer_card])
        withdrawn = parse_cards(request.withdrawn_cards)
        report = await asyncio.to_thread(
            service.evaluate,
            player,
            dealer,
            withdrawn,
            rules,
            request.use_cache,
            request.splits_left,
        )
    except InvalidHandError as e:
        logger.info("Rejected situation", error=str(e))
        raise HTTPException(status_code=422, detail=str(e))

    data = report.to_dict()
    return OddsResponse(
        key=report.key,
        player_hand=format_hand(player),
        dealer_card=format_hand(dealer),
        rules=rules,
        stand=data["stand"],
        hit=data["hit"],
        double=data["double"],
        split=data["split"],
        best_action=data["best_action"],
    )
