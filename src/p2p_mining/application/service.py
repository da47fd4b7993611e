"""ClaimService: the time-gated mining reward.

A claim is granted by a compare-and-set on the profile row: the UPDATE only
matches while ``version`` is unchanged and the cooldown has elapsed. Of N
concurrent claims for one user exactly one gets the row; the rest see
ClaimNotReadyError and credit nothing.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.p2p_account.domain.repository import ProfileRepositoryProtocol
from src.p2p_account.infrastructure.persistence import ProfileRepository
from src.p2p_common.datetime_utils import utc_now
from src.p2p_common.enums import FundOrigin, TransactionKind
from src.p2p_common.errors import ClaimNotReadyError
from src.p2p_common.units import units_to_display
from src.p2p_ledger.domain.store import LedgerStore
from src.p2p_mining.application.schemas import ClaimResponse, ClaimStatusResponse
from src.p2p_mining.domain.cooldown import ClaimState, derive_state, time_remaining
from src.p2p_referral.domain.service import CommissionAccrual

logger = logging.getLogger(__name__)


class ClaimService:
    def __init__(
        self,
        profiles: ProfileRepositoryProtocol | None = None,
        store: LedgerStore | None = None,
        commission: CommissionAccrual | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._profiles: ProfileRepositoryProtocol = profiles or ProfileRepository()
        self._store = store or LedgerStore()
        self._commission = commission or CommissionAccrual()
        self._clock = clock

    async def claim(self, db: AsyncSession, user_id: str) -> ClaimResponse:
        amount = settings.CLAIM_AMOUNT
        try:
            profile = await self._profiles.get_or_create(db, user_id)
            now = self._clock()
            if derive_state(profile.next_claim_at, now) == ClaimState.COOLING:
                raise ClaimNotReadyError(
                    time_remaining(profile.next_claim_at, now), profile.next_claim_at
                )

            next_claim_at = now + timedelta(seconds=settings.CLAIM_INTERVAL_SECONDS)
            updated = await self._profiles.record_claim(
                db, user_id, profile.version, now, next_claim_at
            )
            if updated is None:
                # Lost the compare-and-set to a concurrent claim
                current = await self._profiles.get(db, user_id)
                gate = current.next_claim_at if current else None
                raise ClaimNotReadyError(time_remaining(gate, now), gate)

            entry_id = await self._store.credit(db, user_id, amount, FundOrigin.MINING)
            await self._store.record(
                db,
                user_id,
                TransactionKind.MINING,
                amount,
                reference_id=str(entry_id),
                description="Mining reward claimed",
            )
            await self._commission.accrue_claim(db, user_id, amount, str(entry_id))
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Mining claim: user=%s amount=%s next=%s", user_id, amount, next_claim_at)
        return ClaimResponse(
            amount=amount,
            amount_display=units_to_display(amount, settings.COIN_SYMBOL),
            claimed_at=now,
            next_claim_at=next_claim_at,
            entry_id=entry_id,
        )

    async def status(self, db: AsyncSession, user_id: str) -> ClaimStatusResponse:
        """Read-only: a user with no profile yet is simply Idle."""
        profile = await self._profiles.get(db, user_id)
        now = self._clock()
        next_claim_at = profile.next_claim_at if profile else None
        return ClaimStatusResponse(
            can_claim=derive_state(next_claim_at, now) == ClaimState.IDLE,
            time_remaining_seconds=time_remaining(next_claim_at, now),
            last_claim_at=profile.last_claim_at if profile else None,
            next_claim_at=next_claim_at,
            claim_amount=settings.CLAIM_AMOUNT,
            interval_seconds=settings.CLAIM_INTERVAL_SECONDS,
        )
