"""Domain models for p2p_offers: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.p2p_common.enums import OfferSide, OfferStatus


@dataclass
class Offer:
    id: str
    owner_id: str
    side: OfferSide
    total_amount: Decimal
    remaining_amount: Decimal
    unit_price: Decimal
    min_trade_amount: Decimal
    max_trade_amount: Decimal
    reference_price: Decimal
    status: OfferStatus = OfferStatus.OPEN
    payment_details: dict[str, Any] | None = None
    terms: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.status == OfferStatus.OPEN

    @property
    def filled_amount(self) -> Decimal:
        return self.total_amount - self.remaining_amount


@dataclass
class TradeSettlement:
    """Outcome of one match against an offer."""

    trade_id: str
    offer_id: str
    side: OfferSide
    seller_id: str
    buyer_id: str
    amount: Decimal
    unit_price: Decimal
    buyer_entry_id: int
    offer_remaining: Decimal
    offer_status: OfferStatus
    commission: Decimal | None = None

    @property
    def fiat_total(self) -> Decimal:
        return self.amount * self.unit_price
