"""CommissionAccrual: referral commission on claims and trades.

Accrual is best-effort: it runs inside a savepoint of the caller's
transaction, and any failure rolls back only that savepoint. The claim or
trade that triggered it commits regardless.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_account.domain.repository import ProfileRepositoryProtocol
from src.p2p_account.infrastructure.persistence import ProfileRepository
from src.p2p_common.enums import CommissionSource, FundOrigin, TransactionKind
from src.p2p_ledger.domain.store import LedgerStore
from src.p2p_referral.domain.commission import calc_commission
from src.p2p_referral.domain.repository import ReferralRepositoryProtocol
from src.p2p_referral.infrastructure.persistence import ReferralRepository

logger = logging.getLogger(__name__)


class CommissionAccrual:
    def __init__(
        self,
        profiles: ProfileRepositoryProtocol | None = None,
        referrals: ReferralRepositoryProtocol | None = None,
        store: LedgerStore | None = None,
    ) -> None:
        self._profiles: ProfileRepositoryProtocol = profiles or ProfileRepository()
        self._referrals: ReferralRepositoryProtocol = referrals or ReferralRepository()
        self._store = store or LedgerStore()

    async def accrue_claim(
        self, db: AsyncSession, user_id: str, claim_amount: Decimal, reference_id: str
    ) -> Decimal | None:
        return await self._accrue(db, user_id, CommissionSource.CLAIM, claim_amount, reference_id)

    async def accrue_trade(
        self, db: AsyncSession, taker_id: str, trade_amount: Decimal, trade_id: str
    ) -> Decimal | None:
        return await self._accrue(db, taker_id, CommissionSource.TRADE, trade_amount, trade_id)

    async def _accrue(
        self,
        db: AsyncSession,
        actor_id: str,
        source: CommissionSource,
        base: Decimal,
        reference_id: str,
    ) -> Decimal | None:
        """Returns the commission credited, or None when nothing was accrued."""
        try:
            async with db.begin_nested():
                return await self._accrue_inner(db, actor_id, source, base, reference_id)
        except Exception:
            logger.exception(
                "Referral commission failed: actor=%s source=%s base=%s ref=%s",
                actor_id, source.value, base, reference_id,
            )
            return None

    async def _accrue_inner(
        self,
        db: AsyncSession,
        actor_id: str,
        source: CommissionSource,
        base: Decimal,
        reference_id: str,
    ) -> Decimal | None:
        profile = await self._profiles.get(db, actor_id)
        if profile is None or profile.referred_by is None:
            return None

        commission = calc_commission(base, source)
        if commission <= 0:
            return None

        edge = await self._referrals.add_commission(db, actor_id, source, commission)
        if edge is None:
            logger.warning(
                "User %s has referrer %s but no referral edge; skipping commission",
                actor_id, profile.referred_by,
            )
            return None

        await self._store.credit(
            db, edge.referrer_id, commission, FundOrigin.REFERRAL_COMMISSION
        )
        await self._store.record(
            db,
            edge.referrer_id,
            TransactionKind.REFERRAL_COMMISSION,
            commission,
            reference_id=reference_id,
            description=f"{source.value} commission from {actor_id}",
        )
        logger.info(
            "Referral commission %s credited to %s (%s by %s)",
            commission, edge.referrer_id, source.value, actor_id,
        )
        return commission
