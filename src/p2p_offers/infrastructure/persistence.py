"""OfferRepository: raw SQL persistence for the offer book.

Matching relies on two guards: the offer row is read ``FOR UPDATE`` and the
decrement itself is conditional on ``status = 'open'`` and enough remaining,
so ``remaining_amount`` can never go below zero.
"""

import json
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.enums import OfferSide, OfferStatus
from src.p2p_common.errors import InternalError
from src.p2p_offers.domain.models import Offer

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, owner_id, side, total_amount, remaining_amount, unit_price,
    min_trade_amount, max_trade_amount, reference_price, status,
    payment_details, terms, created_at, updated_at
"""

_INSERT_OFFER_SQL = text(f"""
    INSERT INTO offers (id, owner_id, side, total_amount, remaining_amount, unit_price,
        min_trade_amount, max_trade_amount, reference_price, status,
        payment_details, terms)
    VALUES (:id, :owner_id, :side, :total_amount, :total_amount, :unit_price,
        :min_trade_amount, :max_trade_amount, :reference_price, 'open',
        CAST(:payment_details AS JSONB), :terms)
    RETURNING {_SELECT_COLUMNS}
""")

_GET_OFFER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM offers WHERE id = :id
""")

_GET_OFFER_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM offers WHERE id = :id
    FOR UPDATE
""")

_DECREMENT_SQL = text(f"""
    UPDATE offers
    SET remaining_amount = remaining_amount - :amount,
        status = CASE WHEN remaining_amount - :amount = 0 THEN 'filled' ELSE status END,
        updated_at = NOW()
    WHERE id = :id
      AND status = 'open'
      AND remaining_amount >= :amount
    RETURNING {_SELECT_COLUMNS}
""")

_UPDATE_STATUS_SQL = text(f"""
    UPDATE offers
    SET status = :to_status, updated_at = NOW()
    WHERE id = :id AND status = :from_status
    RETURNING {_SELECT_COLUMNS}
""")

_LIST_OPEN_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM offers
    WHERE status = 'open'
      AND (CAST(:side AS TEXT) IS NULL OR side = :side)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR CAST(id AS BIGINT) < CAST(:cursor_id AS BIGINT))
    ORDER BY CAST(id AS BIGINT) DESC
    LIMIT :limit
""")

_LIST_BY_OWNER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM offers
    WHERE owner_id = :owner_id
      AND (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS TEXT) IS NULL OR CAST(id AS BIGINT) < CAST(:cursor_id AS BIGINT))
    ORDER BY CAST(id AS BIGINT) DESC
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_offer(row: Any) -> Offer:
    details = row.payment_details
    if isinstance(details, str):
        details = json.loads(details)
    return Offer(
        id=row.id,
        owner_id=row.owner_id,
        side=OfferSide(row.side),
        total_amount=Decimal(row.total_amount),
        remaining_amount=Decimal(row.remaining_amount),
        unit_price=Decimal(row.unit_price),
        min_trade_amount=Decimal(row.min_trade_amount),
        max_trade_amount=Decimal(row.max_trade_amount),
        reference_price=Decimal(row.reference_price),
        status=OfferStatus(row.status),
        payment_details=details,
        terms=row.terms,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class OfferRepository:
    """Concrete implementation of OfferRepositoryProtocol using raw SQL."""

    async def insert(self, db: AsyncSession, offer: Offer) -> Offer:
        result = await db.execute(
            _INSERT_OFFER_SQL,
            {
                "id": offer.id,
                "owner_id": offer.owner_id,
                "side": offer.side,
                "total_amount": offer.total_amount,
                "unit_price": offer.unit_price,
                "min_trade_amount": offer.min_trade_amount,
                "max_trade_amount": offer.max_trade_amount,
                "reference_price": offer.reference_price,
                "payment_details": (
                    json.dumps(offer.payment_details) if offer.payment_details else None
                ),
                "terms": offer.terms,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError(f"Offer insert returned no rows: {offer.id}")
        return _row_to_offer(row)

    async def get(self, db: AsyncSession, offer_id: str) -> Offer | None:
        row = (await db.execute(_GET_OFFER_SQL, {"id": offer_id})).fetchone()
        return _row_to_offer(row) if row else None

    async def get_for_update(self, db: AsyncSession, offer_id: str) -> Offer | None:
        row = (await db.execute(_GET_OFFER_FOR_UPDATE_SQL, {"id": offer_id})).fetchone()
        return _row_to_offer(row) if row else None

    async def decrement_remaining(
        self, db: AsyncSession, offer_id: str, amount: Decimal
    ) -> Offer | None:
        row = (
            await db.execute(_DECREMENT_SQL, {"id": offer_id, "amount": amount})
        ).fetchone()
        return _row_to_offer(row) if row else None

    async def update_status(
        self,
        db: AsyncSession,
        offer_id: str,
        from_status: OfferStatus,
        to_status: OfferStatus,
    ) -> Offer | None:
        row = (
            await db.execute(
                _UPDATE_STATUS_SQL,
                {"id": offer_id, "from_status": from_status, "to_status": to_status},
            )
        ).fetchone()
        return _row_to_offer(row) if row else None

    async def list_open(
        self,
        db: AsyncSession,
        side: OfferSide | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Offer]:
        result = await db.execute(
            _LIST_OPEN_SQL, {"side": side, "cursor_id": cursor_id, "limit": limit}
        )
        return [_row_to_offer(row) for row in result.fetchall()]

    async def list_by_owner(
        self,
        db: AsyncSession,
        owner_id: str,
        status: OfferStatus | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Offer]:
        result = await db.execute(
            _LIST_BY_OWNER_SQL,
            {"owner_id": owner_id, "status": status, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_offer(row) for row in result.fetchall()]
