"""Payment confirmations written by the external settlement service.

A confirmation authorises exactly one trade: consuming it is a conditional
UPDATE on ``consumed_at IS NULL``, and concurrent takers skip rows already
locked by another transaction.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

_CONSUME_SQL = text("""
    UPDATE payment_confirmations
    SET consumed_at = NOW(), trade_id = :trade_id
    WHERE id = (
        SELECT id FROM payment_confirmations
        WHERE offer_id = :offer_id
          AND taker_id = :taker_id
          AND amount = :amount
          AND consumed_at IS NULL
        ORDER BY confirmed_at ASC
        LIMIT 1
        FOR UPDATE SKIP LOCKED
    )
      AND consumed_at IS NULL
    RETURNING id
""")


class PaymentConfirmationRepository:
    async def consume(
        self,
        db: AsyncSession,
        offer_id: str,
        taker_id: str,
        amount: Decimal,
        trade_id: str,
    ) -> int | None:
        result = await db.execute(
            _CONSUME_SQL,
            {"offer_id": offer_id, "taker_id": taker_id, "amount": amount, "trade_id": trade_id},
        )
        row = result.fetchone()
        return int(row.id) if row else None
