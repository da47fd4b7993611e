"""ReferralRepository Protocol: interface contract for referral_edges."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.enums import CommissionSource
from src.p2p_referral.domain.models import ReferralEdge


class ReferralRepositoryProtocol(Protocol):
    async def create_edge(
        self, db: AsyncSession, referrer_id: str, referred_id: str, referral_code: str
    ) -> ReferralEdge: ...

    async def add_commission(
        self,
        db: AsyncSession,
        referred_id: str,
        source: CommissionSource,
        amount: Decimal,
    ) -> ReferralEdge | None: ...

    async def list_edges(self, db: AsyncSession, referrer_id: str) -> list[ReferralEdge]: ...
