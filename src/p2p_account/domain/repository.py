"""ProfileRepository Protocol: interface contract for the user_profiles table."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_account.domain.models import UserProfile


class ProfileRepositoryProtocol(Protocol):
    async def get(self, db: AsyncSession, user_id: str) -> UserProfile | None: ...

    async def get_or_create(self, db: AsyncSession, user_id: str) -> UserProfile: ...

    async def get_by_referral_code(
        self, db: AsyncSession, referral_code: str
    ) -> UserProfile | None: ...

    async def record_claim(
        self,
        db: AsyncSession,
        user_id: str,
        expected_version: int,
        claimed_at: datetime,
        next_claim_at: datetime,
    ) -> UserProfile | None: ...

    async def set_referrer(
        self, db: AsyncSession, user_id: str, referrer_id: str
    ) -> UserProfile | None: ...

    async def increment_total_trades(self, db: AsyncSession, user_ids: list[str]) -> None: ...
