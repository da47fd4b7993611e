"""ReferralApplicationService: referrals dashboard and the signup hook."""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_account.domain.repository import ProfileRepositoryProtocol
from src.p2p_account.infrastructure.persistence import ProfileRepository
from src.p2p_common.enums import TransactionKind
from src.p2p_common.errors import InvalidStateError, NotFoundError, ValidationError
from src.p2p_ledger.domain.store import LedgerStore
from src.p2p_referral.application.schemas import (
    CommissionItem,
    CommissionTotals,
    LinkReferrerResponse,
    ReferralEdgeItem,
    ReferralSummaryResponse,
)
from src.p2p_referral.domain.repository import ReferralRepositoryProtocol
from src.p2p_referral.infrastructure.persistence import ReferralRepository

logger = logging.getLogger(__name__)

RECENT_COMMISSIONS_LIMIT = 20


class ReferralApplicationService:
    def __init__(
        self,
        profiles: ProfileRepositoryProtocol | None = None,
        referrals: ReferralRepositoryProtocol | None = None,
        store: LedgerStore | None = None,
    ) -> None:
        self._profiles: ProfileRepositoryProtocol = profiles or ProfileRepository()
        self._referrals: ReferralRepositoryProtocol = referrals or ReferralRepository()
        self._store = store or LedgerStore()

    async def get_summary(self, db: AsyncSession, user_id: str) -> ReferralSummaryResponse:
        try:
            profile = await self._profiles.get_or_create(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        edges = await self._referrals.list_edges(db, user_id)
        trade_total = sum((e.accrued_trade_commission for e in edges), Decimal(0))
        claim_total = sum((e.accrued_claim_commission for e in edges), Decimal(0))
        recent = await self._store.list_transactions(
            db, user_id, None, RECENT_COMMISSIONS_LIMIT, TransactionKind.REFERRAL_COMMISSION
        )
        return ReferralSummaryResponse(
            referral_code=profile.referral_code,
            referred_by=profile.referred_by,
            referral_count=len(edges),
            edges=[
                ReferralEdgeItem(
                    referred_id=e.referred_id,
                    accrued_trade_commission=e.accrued_trade_commission,
                    accrued_claim_commission=e.accrued_claim_commission,
                    total_commission=e.total_commission,
                    joined_at=e.created_at,
                )
                for e in edges
            ],
            totals=CommissionTotals(
                trade=trade_total, claim=claim_total, total=trade_total + claim_total
            ),
            recent_commissions=[
                CommissionItem(
                    id=r.id,
                    amount=r.amount,
                    reference_id=r.reference_id,
                    description=r.description,
                    created_at=r.created_at,
                )
                for r in recent
            ],
        )

    async def link_referrer(
        self, db: AsyncSession, user_id: str, referral_code: str
    ) -> LinkReferrerResponse:
        """Attach ``user_id`` to the owner of ``referral_code``. Once per user."""
        try:
            profile = await self._profiles.get_or_create(db, user_id)
            referrer = await self._profiles.get_by_referral_code(db, referral_code)
            if referrer is None:
                raise NotFoundError("Referral code", referral_code)
            if referrer.user_id == user_id:
                raise ValidationError("referral_code", "Cannot use your own referral code")
            if profile.referred_by is not None:
                raise InvalidStateError("Referrer already set")

            updated = await self._profiles.set_referrer(db, user_id, referrer.user_id)
            if updated is None:
                raise InvalidStateError("Referrer already set")
            await self._referrals.create_edge(db, referrer.user_id, user_id, referral_code)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("User %s linked to referrer %s", user_id, referrer.user_id)
        return LinkReferrerResponse(
            user_id=user_id, referrer_id=referrer.user_id, referral_code=referral_code
        )
