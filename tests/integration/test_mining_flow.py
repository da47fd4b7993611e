"""Integration tests for mining claims, balances and referrals (requires PG + Redis).

Uses the session-scoped client fixture from tests/integration/conftest.py.
"""

import asyncio
from decimal import Decimal

import pytest
from httpx import AsyncClient

from tests.integration.support import new_user

pytestmark = [pytest.mark.integration, pytest.mark.asyncio(loop_scope="session")]


class TestClaim:
    async def test_claim_credits_balance_once(self, client: AsyncClient) -> None:
        _, headers = new_user()

        first = await client.post("/api/v1/mining/claim", headers=headers)
        second = await client.post("/api/v1/mining/claim", headers=headers)

        assert first.status_code == 200
        assert second.status_code == 429
        assert second.json()["code"] == 3001
        balance = (await client.get("/api/v1/account/balance", headers=headers)).json()["data"]
        assert Decimal(balance["available_balance"]) == Decimal("0.73")

    async def test_concurrent_claims_grant_exactly_one(self, client: AsyncClient) -> None:
        _, headers = new_user()
        await client.get("/api/v1/account/profile", headers=headers)

        responses = await asyncio.gather(
            *(client.post("/api/v1/mining/claim", headers=headers) for _ in range(5))
        )

        assert sorted(r.status_code for r in responses) == [200, 429, 429, 429, 429]
        balance = (await client.get("/api/v1/account/balance", headers=headers)).json()["data"]
        assert Decimal(balance["available_balance"]) == Decimal("0.73")

    async def test_history_lists_claim(self, client: AsyncClient) -> None:
        _, headers = new_user()
        await client.post("/api/v1/mining/claim", headers=headers)

        resp = await client.get("/api/v1/account/transactions", headers=headers)

        items = resp.json()["data"]["items"]
        assert [i["kind"] for i in items] == ["mining"]


class TestReferral:
    async def test_claim_commission_reaches_referrer(self, client: AsyncClient) -> None:
        _, ref_headers = new_user()
        code = (await client.get("/api/v1/account/profile", headers=ref_headers)).json()[
            "data"
        ]["referral_code"]
        _, headers = new_user()

        linked = await client.post(
            "/api/v1/referrals/link", json={"referral_code": code}, headers=headers
        )
        assert linked.status_code == 200
        await client.post("/api/v1/mining/claim", headers=headers)

        summary = (await client.get("/api/v1/referrals/summary", headers=ref_headers)).json()[
            "data"
        ]
        assert summary["referral_count"] == 1
        assert Decimal(summary["totals"]["claim"]) == Decimal("0.01095")

    async def test_own_code_rejected(self, client: AsyncClient) -> None:
        _, headers = new_user()
        code = (await client.get("/api/v1/account/profile", headers=headers)).json()["data"][
            "referral_code"
        ]
        resp = await client.post(
            "/api/v1/referrals/link", json={"referral_code": code}, headers=headers
        )
        assert resp.status_code == 422
