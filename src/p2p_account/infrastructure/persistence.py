"""ProfileRepository: raw SQL persistence for user_profiles.

Claims are granted with a compare-and-set on ``version``: the UPDATE only
matches when the row is unchanged since it was read AND the cooldown has
elapsed, so of two racing claims exactly one gets a row back.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_account.domain.models import UserProfile
from src.p2p_account.domain.referral_code import new_referral_code
from src.p2p_common.errors import InternalError

_CODE_ATTEMPTS = 5

_PROFILE_COLUMNS = """
    user_id, last_claim_at, next_claim_at, rating, total_trades,
    referral_code, referred_by, version, created_at, updated_at
"""

_GET_PROFILE_SQL = text(f"""
    SELECT {_PROFILE_COLUMNS}
    FROM user_profiles WHERE user_id = :user_id
""")

_GET_BY_CODE_SQL = text(f"""
    SELECT {_PROFILE_COLUMNS}
    FROM user_profiles WHERE referral_code = :referral_code
""")

_INSERT_PROFILE_SQL = text(f"""
    INSERT INTO user_profiles (user_id, referral_code)
    VALUES (:user_id, :referral_code)
    ON CONFLICT DO NOTHING
    RETURNING {_PROFILE_COLUMNS}
""")

_RECORD_CLAIM_SQL = text(f"""
    UPDATE user_profiles
    SET last_claim_at = :claimed_at,
        next_claim_at = :next_claim_at,
        version = version + 1,
        updated_at = NOW()
    WHERE user_id = :user_id
      AND version = :expected_version
      AND (next_claim_at IS NULL OR next_claim_at <= :claimed_at)
    RETURNING {_PROFILE_COLUMNS}
""")

_SET_REFERRER_SQL = text(f"""
    UPDATE user_profiles
    SET referred_by = :referrer_id, updated_at = NOW()
    WHERE user_id = :user_id
      AND referred_by IS NULL
      AND user_id <> :referrer_id
    RETURNING {_PROFILE_COLUMNS}
""")

_INCREMENT_TRADES_SQL = text("""
    UPDATE user_profiles
    SET total_trades = total_trades + 1, updated_at = NOW()
    WHERE user_id IN :user_ids
""").bindparams(bindparam("user_ids", expanding=True))


def _row_to_profile(row: Any) -> UserProfile:
    return UserProfile(
        user_id=row.user_id,
        last_claim_at=row.last_claim_at,
        next_claim_at=row.next_claim_at,
        rating=Decimal(row.rating),
        total_trades=row.total_trades,
        referral_code=row.referral_code,
        referred_by=row.referred_by,
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class ProfileRepository:
    """Concrete implementation of ProfileRepositoryProtocol using raw SQL."""

    async def get(self, db: AsyncSession, user_id: str) -> UserProfile | None:
        row = (await db.execute(_GET_PROFILE_SQL, {"user_id": user_id})).fetchone()
        return _row_to_profile(row) if row else None

    async def get_or_create(self, db: AsyncSession, user_id: str) -> UserProfile:
        for _ in range(_CODE_ATTEMPTS):
            existing = await self.get(db, user_id)
            if existing is not None:
                return existing
            row = (
                await db.execute(
                    _INSERT_PROFILE_SQL,
                    {"user_id": user_id, "referral_code": new_referral_code()},
                )
            ).fetchone()
            if row is not None:
                return _row_to_profile(row)
            # lost an insert race or hit a referral_code collision; re-read and retry
        raise InternalError(f"Could not create profile for user {user_id}")

    async def get_by_referral_code(
        self, db: AsyncSession, referral_code: str
    ) -> UserProfile | None:
        row = (
            await db.execute(_GET_BY_CODE_SQL, {"referral_code": referral_code})
        ).fetchone()
        return _row_to_profile(row) if row else None

    async def record_claim(
        self,
        db: AsyncSession,
        user_id: str,
        expected_version: int,
        claimed_at: datetime,
        next_claim_at: datetime,
    ) -> UserProfile | None:
        row = (
            await db.execute(
                _RECORD_CLAIM_SQL,
                {
                    "user_id": user_id,
                    "expected_version": expected_version,
                    "claimed_at": claimed_at,
                    "next_claim_at": next_claim_at,
                },
            )
        ).fetchone()
        return _row_to_profile(row) if row else None

    async def set_referrer(
        self, db: AsyncSession, user_id: str, referrer_id: str
    ) -> UserProfile | None:
        row = (
            await db.execute(
                _SET_REFERRER_SQL, {"user_id": user_id, "referrer_id": referrer_id}
            )
        ).fetchone()
        return _row_to_profile(row) if row else None

    async def increment_total_trades(self, db: AsyncSession, user_ids: list[str]) -> None:
        await db.execute(_INCREMENT_TRADES_SQL, {"user_ids": user_ids})
