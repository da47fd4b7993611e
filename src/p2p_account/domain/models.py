"""Domain models for p2p_account: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class UserProfile:
    user_id: str
    last_claim_at: datetime | None = None
    next_claim_at: datetime | None = None  # sole claim gate, never moves backwards
    rating: Decimal = Decimal("0")
    total_trades: int = 0
    referral_code: str | None = None
    referred_by: str | None = None
    version: int = 0                       # compare-and-set token for claims
    created_at: datetime | None = None
    updated_at: datetime | None = None
