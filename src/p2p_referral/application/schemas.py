from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class LinkReferrerRequest(BaseModel):
    referral_code: str = Field(..., min_length=4, max_length=32)

    @field_validator("referral_code")
    @classmethod
    def normalise_code(cls, v: str) -> str:
        return v.strip().upper()


class LinkReferrerResponse(BaseModel):
    user_id: str
    referrer_id: str
    referral_code: str


class ReferralEdgeItem(BaseModel):
    referred_id: str
    accrued_trade_commission: Decimal
    accrued_claim_commission: Decimal
    total_commission: Decimal
    joined_at: datetime | None


class CommissionTotals(BaseModel):
    trade: Decimal
    claim: Decimal
    total: Decimal


class CommissionItem(BaseModel):
    id: int
    amount: Decimal
    reference_id: str | None
    description: str | None
    created_at: datetime | None


class ReferralSummaryResponse(BaseModel):
    referral_code: str | None
    referred_by: str | None
    referral_count: int
    edges: list[ReferralEdgeItem]
    totals: CommissionTotals
    recent_commissions: list[CommissionItem]
