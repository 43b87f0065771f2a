"""
Tests for the HTTP API.

The app lifespan does not run under ASGITransport, so the odds
service is installed by a fixture.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from api.dependencies import set_odds_service
from api.server import app
from blackjack.cards import parse_cards
from blackjack.encoding import encode_key
from core.config import Settings
from manager.odds_service import OddsService


@pytest.fixture
def odds_service():
    service = OddsService(Settings(storage_backend="memory"))
    set_odds_service(service)
    yield service
    set_odds_service(None)


@pytest_asyncio.fixture
async def client(odds_service):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "blackjack-odds"}


@pytest.mark.asyncio
async def test_ready(client):
    response = await client.get("/ready")

    assert response.status_code == 200
    assert response.json()["checks"] == {
        "storage_backend": "memory",
        "stand_caches_loaded": 0,
    }


@pytest.mark.asyncio
async def test_default_rules(client):
    response = await client.get("/api/v1/odds/rules")

    assert response.status_code == 200
    data = response.json()
    assert data["num_decks"] == 8
    assert data["dealer_stands_soft_17"] is True
    assert data["blackjack_pays"] == 1.5


@pytest.mark.asyncio
async def test_blackjack_only_stands(client):
    response = await client.post(
        "/api/v1/odds",
        json={"player_cards": ["A", "K"], "dealer_card": "6"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["player_hand"] == "A,T"
    assert data["dealer_card"] == "6"
    assert data["stand"] == pytest.approx(1.5)
    assert data["hit"] is None
    assert data["double"] is None
    assert data["split"] is None
    assert data["best_action"] == "Stand"


@pytest.mark.asyncio
async def test_hard_nineteen(client):
    response = await client.post(
        "/api/v1/odds",
        json={"player_cards": ["9", "10"], "dealer_card": "6"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["key"] == encode_key(parse_cards("9,T"), 5)
    assert data["hit"] is not None
    assert data["double"] is not None
    assert data["split"] is None
    assert data["stand"] > data["hit"] > data["double"]
    assert data["best_action"] == "Stand"


@pytest.mark.asyncio
async def test_rules_override(client):
    response = await client.post(
        "/api/v1/odds",
        json={
            "player_cards": ["9", "T"],
            "dealer_card": "6",
            "rules": {"num_decks": 1},
        },
    )

    assert response.status_code == 200
    assert response.json()["rules"]["num_decks"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"player_cards": ["X", "7"], "dealer_card": "6"},
        {"player_cards": ["T", "T", "5"], "dealer_card": "6"},
        {"player_cards": ["7", "7"], "dealer_card": "Z"},
    ],
)
async def test_invalid_situation(client, payload):
    response = await client.post("/api/v1/odds", json=payload)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_empty_player_hand_fails_validation(client):
    response = await client.post(
        "/api/v1/odds",
        json={"player_cards": [], "dealer_card": "6"},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_exhausted_shoe_is_rejected(client):
    # Every other card of a single deck is already out
    withdrawn = [label for label in "A2345789" for _ in range(4)] + ["6"] * 3 + ["T"] * 14
    response = await client.post(
        "/api/v1/odds",
        json={
            "player_cards": ["T", "T"],
            "dealer_card": "6",
            "withdrawn_cards": withdrawn,
            "rules": {"num_decks": 1},
        },
    )

    assert response.status_code == 422
    assert "card(s) left" in response.json()["detail"]
