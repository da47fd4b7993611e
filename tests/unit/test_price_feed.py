"""Unit tests for the cached reference price feed."""

from datetime import UTC, datetime
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.p2p_common.errors import PriceUnavailableError
from src.p2p_market.infrastructure.price_feed import PRICE_CACHE_KEY, PriceFeed


def _db(price: str | None) -> MagicMock:
    row = None
    if price is not None:
        row = SimpleNamespace(price=Decimal(price), recorded_at=datetime(2026, 1, 1, tzinfo=UTC))
    result = MagicMock()
    result.fetchone.return_value = row
    db = MagicMock()
    db.execute = AsyncMock(return_value=result)
    return db


def _feed(redis: AsyncMock) -> PriceFeed:
    return PriceFeed(redis_factory=AsyncMock(return_value=redis), ttl_seconds=60)


class TestPriceFeed:
    async def test_cache_hit_skips_database(self) -> None:
        redis = AsyncMock()
        redis.get.return_value = "16.25"
        db = _db("99")

        price = await _feed(redis).get_reference_price(db)

        assert price == Decimal("16.25")
        db.execute.assert_not_awaited()
        redis.set.assert_not_awaited()

    async def test_cache_miss_reads_database_and_populates(self) -> None:
        redis = AsyncMock()
        redis.get.return_value = None

        price = await _feed(redis).get_reference_price(_db("16.00"))

        assert price == Decimal("16.00")
        redis.set.assert_awaited_once_with(PRICE_CACHE_KEY, "16.00", ex=60)

    async def test_redis_outage_falls_back_to_database(self) -> None:
        redis = AsyncMock()
        redis.get.side_effect = RedisConnectionError("down")
        redis.set.side_effect = RedisConnectionError("down")

        price = await _feed(redis).get_reference_price(_db("15.50"))

        assert price == Decimal("15.50")

    async def test_no_price_recorded(self) -> None:
        redis = AsyncMock()
        redis.get.return_value = None
        with pytest.raises(PriceUnavailableError):
            await _feed(redis).get_reference_price(_db(None))
        redis.set.assert_not_awaited()
