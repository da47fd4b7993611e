from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class ProfileResponse(BaseModel):
    user_id: str
    referral_code: str | None
    referred_by: str | None
    rating: Decimal
    total_trades: int
    last_claim_at: datetime | None
    next_claim_at: datetime | None
