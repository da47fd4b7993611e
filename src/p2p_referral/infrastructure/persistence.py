"""ReferralRepository: raw SQL persistence for referral_edges.

Accruals are a single ``UPDATE ... SET x = x + :amount`` so concurrent trades
by the same referred user add up without a read-modify-write race.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.enums import CommissionSource
from src.p2p_common.errors import InternalError
from src.p2p_referral.domain.models import ReferralEdge

_EDGE_COLUMNS = """
    referrer_id, referred_id, referral_code,
    accrued_trade_commission, accrued_claim_commission, created_at, updated_at
"""

_INSERT_EDGE_SQL = text(f"""
    INSERT INTO referral_edges (referrer_id, referred_id, referral_code)
    VALUES (:referrer_id, :referred_id, :referral_code)
    RETURNING {_EDGE_COLUMNS}
""")

_ADD_TRADE_SQL = text(f"""
    UPDATE referral_edges
    SET accrued_trade_commission = accrued_trade_commission + :amount,
        updated_at = NOW()
    WHERE referred_id = :referred_id
    RETURNING {_EDGE_COLUMNS}
""")

_ADD_CLAIM_SQL = text(f"""
    UPDATE referral_edges
    SET accrued_claim_commission = accrued_claim_commission + :amount,
        updated_at = NOW()
    WHERE referred_id = :referred_id
    RETURNING {_EDGE_COLUMNS}
""")

_LIST_EDGES_SQL = text(f"""
    SELECT {_EDGE_COLUMNS}
    FROM referral_edges
    WHERE referrer_id = :referrer_id
    ORDER BY created_at DESC
""")


def _row_to_edge(row: Any) -> ReferralEdge:
    return ReferralEdge(
        referrer_id=row.referrer_id,
        referred_id=row.referred_id,
        referral_code=row.referral_code,
        accrued_trade_commission=Decimal(row.accrued_trade_commission),
        accrued_claim_commission=Decimal(row.accrued_claim_commission),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class ReferralRepository:
    async def create_edge(
        self, db: AsyncSession, referrer_id: str, referred_id: str, referral_code: str
    ) -> ReferralEdge:
        row = (
            await db.execute(
                _INSERT_EDGE_SQL,
                {
                    "referrer_id": referrer_id,
                    "referred_id": referred_id,
                    "referral_code": referral_code,
                },
            )
        ).fetchone()
        if row is None:
            raise InternalError("Referral edge insert returned no rows")
        return _row_to_edge(row)

    async def add_commission(
        self,
        db: AsyncSession,
        referred_id: str,
        source: CommissionSource,
        amount: Decimal,
    ) -> ReferralEdge | None:
        sql = _ADD_TRADE_SQL if source == CommissionSource.TRADE else _ADD_CLAIM_SQL
        row = (
            await db.execute(sql, {"referred_id": referred_id, "amount": amount})
        ).fetchone()
        return _row_to_edge(row) if row else None

    async def list_edges(self, db: AsyncSession, referrer_id: str) -> list[ReferralEdge]:
        result = await db.execute(_LIST_EDGES_SQL, {"referrer_id": referrer_id})
        return [_row_to_edge(row) for row in result.fetchall()]
