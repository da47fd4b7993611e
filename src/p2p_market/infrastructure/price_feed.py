"""Reference price adapter: newest row of reference_prices, cached in Redis.

The external price monitor writes reference_prices on its own cadence; this
module only reads. Cache-aside: Redis first, database on miss, then populate
with PRICE_CACHE_TTL_SECONDS. A Redis outage degrades to database reads.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from decimal import Decimal

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.p2p_common.errors import PriceUnavailableError
from src.p2p_common.redis_client import get_redis

logger = logging.getLogger(__name__)

PRICE_CACHE_KEY = "market:reference_price"

_LATEST_PRICE_SQL = text("""
    SELECT price, recorded_at
    FROM reference_prices
    ORDER BY recorded_at DESC, id DESC
    LIMIT 1
""")


class PriceFeed:
    def __init__(
        self,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        ttl_seconds: int | None = None,
    ) -> None:
        self._redis_factory = redis_factory
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.PRICE_CACHE_TTL_SECONDS

    async def get_reference_price(self, db: AsyncSession) -> Decimal:
        """Raises PriceUnavailableError when no price has ever been recorded."""
        cached = await self._read_cache()
        if cached is not None:
            return cached

        price, recorded_at = await self._read_db(db)
        await self._write_cache(price)
        logger.debug("Reference price %s (recorded %s) loaded from database", price, recorded_at)
        return price

    async def _read_db(self, db: AsyncSession) -> tuple[Decimal, datetime]:
        row = (await db.execute(_LATEST_PRICE_SQL)).fetchone()
        if row is None:
            raise PriceUnavailableError()
        return Decimal(row.price), row.recorded_at

    async def _read_cache(self) -> Decimal | None:
        try:
            redis = await self._redis_factory()
            value = await redis.get(PRICE_CACHE_KEY)
        except RedisError:
            logger.warning("Price cache read failed; falling back to database", exc_info=True)
            return None
        return Decimal(value) if value is not None else None

    async def _write_cache(self, price: Decimal) -> None:
        try:
            redis = await self._redis_factory()
            await redis.set(PRICE_CACHE_KEY, str(price), ex=self._ttl)
        except RedisError:
            logger.warning("Price cache write failed", exc_info=True)
