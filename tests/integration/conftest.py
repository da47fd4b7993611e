"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.

Pre-condition: PostgreSQL and Redis reachable at the configured URLs, `alembic upgrade head` applied.
"""

import uuid
from collections.abc import Awaitable, Callable
from decimal import Decimal

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.main import app
from src.p2p_common.database import async_session_factory
from src.p2p_common.redis_client import get_redis
from src.p2p_market.infrastructure.price_feed import PRICE_CACHE_KEY

REFERENCE_PRICE = Decimal("16.00")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client: keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session", scope="session", autouse=True)
async def reference_price() -> Decimal:
    """Record a fresh reference price and drop any cached one."""
    async with async_session_factory() as session:
        await session.execute(
            text("INSERT INTO reference_prices (price, source) VALUES (:price, 'tests')"),
            {"price": REFERENCE_PRICE},
        )
        await session.commit()
    redis = await get_redis()
    await redis.delete(PRICE_CACHE_KEY)
    return REFERENCE_PRICE


async def _seed_coins(user_id: str, amount: str) -> None:
    async with async_session_factory() as session:
        await session.execute(
            text("""
                INSERT INTO fund_entries (owner_id, amount, status, origin)
                VALUES (:owner_id, :amount, 'available', 'mining')
            """),
            {"owner_id": user_id, "amount": Decimal(amount)},
        )
        await session.commit()


async def _confirm_payment(offer_id: str, taker_id: str, amount: str) -> None:
    async with async_session_factory() as session:
        await session.execute(
            text("""
                INSERT INTO payment_confirmations (offer_id, taker_id, amount, external_ref)
                VALUES (:offer_id, :taker_id, :amount, :external_ref)
            """),
            {
                "offer_id": offer_id,
                "taker_id": taker_id,
                "amount": Decimal(amount),
                "external_ref": f"mpesa_{uuid.uuid4().hex[:10]}",
            },
        )
        await session.commit()


@pytest_asyncio.fixture(loop_scope="session")
async def seed_coins() -> Callable[[str, str], Awaitable[None]]:
    """Credit available coins straight into the ledger."""
    return _seed_coins


@pytest_asyncio.fixture(loop_scope="session")
async def confirm_payment() -> Callable[[str, str, str], Awaitable[None]]:
    """Stand in for the settlement service confirming an off-platform payment."""
    return _confirm_payment
