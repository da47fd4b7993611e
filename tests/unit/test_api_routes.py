"""HTTP-level tests: envelope shape, auth, and error mapping.

Routers are exercised against the in-memory world by swapping the module
level services and overriding the database dependency.
"""

from collections.abc import AsyncGenerator, Iterator
from decimal import Decimal

import pytest
from httpx import AsyncClient

import src.p2p_ledger.api.router as ledger_api
import src.p2p_market.api.router as market_api
import src.p2p_mining.api.router as mining_api
from src.main import app
from src.p2p_common.database import get_db_session
from src.p2p_gateway.auth.jwt_handler import create_access_token
from src.p2p_ledger.application.service import LedgerApplicationService
from tests.unit.fakes import FakeSession, World


class _FixedFeed:
    def __init__(self, price: str) -> None:
        self.price = Decimal(price)

    async def get_reference_price(self, db: object) -> Decimal:
        return self.price


@pytest.fixture(autouse=True)
def wired(world: World, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    async def _session() -> AsyncGenerator[FakeSession, None]:
        yield world.session()

    monkeypatch.setattr(mining_api, "_service", world.claims)
    monkeypatch.setattr(ledger_api, "_service", LedgerApplicationService(store=world.store))
    monkeypatch.setattr(market_api, "_feed", _FixedFeed("16.00"))
    app.dependency_overrides[get_db_session] = _session
    yield
    app.dependency_overrides.clear()


def _auth(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_missing_token_is_401_envelope(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/account/balance")
    assert resp.status_code == 401
    body = resp.json()
    assert body["code"] == 1001
    assert body["request_id"] == resp.headers["X-Request-ID"]


async def test_bad_token_is_401(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/v1/mining/claim", headers={"Authorization": "Bearer nonsense"}
    )
    assert resp.status_code == 401


async def test_claim_then_balance(client: AsyncClient) -> None:
    resp = await client.post("/api/v1/mining/claim", headers=_auth("u1"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["code"] == 0
    assert body["message"] == "Mining reward claimed"
    assert Decimal(body["data"]["amount"]) == Decimal("0.73")

    resp = await client.get("/api/v1/account/balance", headers=_auth("u1"))
    data = resp.json()["data"]
    assert Decimal(data["available_balance"]) == Decimal("0.73")
    assert Decimal(data["locked_balance"]) == 0


async def test_claim_too_early_is_429_with_countdown(client: AsyncClient) -> None:
    await client.post("/api/v1/mining/claim", headers=_auth("u1"))

    resp = await client.post("/api/v1/mining/claim", headers=_auth("u1"))

    assert resp.status_code == 429
    body = resp.json()
    assert body["code"] == 3001
    assert body["data"]["time_remaining_seconds"] == 3 * 60 * 60


async def test_claim_status(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/mining/status", headers=_auth("u1"))
    data = resp.json()["data"]
    assert data["can_claim"] is True
    assert data["time_remaining_seconds"] == 0


async def test_market_price_is_public(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/market/price")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert Decimal(data["price"]) == Decimal("16")
    assert Decimal(data["band_low"]) == Decimal("15.36")
    assert Decimal(data["band_high"]) == Decimal("16.64")
    assert data["band_bps"] == 400
