from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_account.application.schemas import ProfileResponse
from src.p2p_account.domain.repository import ProfileRepositoryProtocol
from src.p2p_account.infrastructure.persistence import ProfileRepository


class ProfileApplicationService:
    def __init__(self, repo: ProfileRepositoryProtocol | None = None) -> None:
        self._repo: ProfileRepositoryProtocol = repo or ProfileRepository()

    async def get_profile(self, db: AsyncSession, user_id: str) -> ProfileResponse:
        """First touch creates the profile, so this commits."""
        try:
            profile = await self._repo.get_or_create(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ProfileResponse(
            user_id=profile.user_id,
            referral_code=profile.referral_code,
            referred_by=profile.referred_by,
            rating=profile.rating,
            total_trades=profile.total_trades,
            last_claim_at=profile.last_claim_at,
            next_claim_at=profile.next_claim_at,
        )
