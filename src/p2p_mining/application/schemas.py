from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class ClaimResponse(BaseModel):
    amount: Decimal
    amount_display: str
    claimed_at: datetime
    next_claim_at: datetime
    entry_id: int


class ClaimStatusResponse(BaseModel):
    can_claim: bool
    time_remaining_seconds: int
    last_claim_at: datetime | None
    next_claim_at: datetime | None
    claim_amount: Decimal
    interval_seconds: int
