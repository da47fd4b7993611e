"""Domain models for p2p_referral: pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class ReferralEdge:
    referrer_id: str
    referred_id: str
    referral_code: str
    accrued_trade_commission: Decimal = Decimal("0")
    accrued_claim_commission: Decimal = Decimal("0")
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def total_commission(self) -> Decimal:
        return self.accrued_trade_commission + self.accrued_claim_commission
