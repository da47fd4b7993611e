# src/p2p_offers/application/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from config.settings import settings
from src.p2p_common.units import units_to_display
from src.p2p_offers.domain.models import Offer, TradeSettlement

# ---------------------------------------------------------------------------
# Payment details: tagged by method_type. Formats are checked by the rule
# table in p2p_offers.domain.payment_methods so errors name the field.
# ---------------------------------------------------------------------------


class MpesaPersonalDetails(BaseModel):
    method_type: Literal["mpesa_personal"]
    full_name: str
    phone_number: str


class MpesaPaybillDetails(BaseModel):
    method_type: Literal["mpesa_paybill"]
    paybill_number: str
    account_number: str


class BankTransferDetails(BaseModel):
    method_type: Literal["bank_transfer"]
    bank_name: str
    account_number: str


class AirtelMoneyDetails(BaseModel):
    method_type: Literal["airtel_money"]
    airtel_money_number: str


PaymentDetails = Annotated[
    MpesaPersonalDetails | MpesaPaybillDetails | BankTransferDetails | AirtelMoneyDetails,
    Field(discriminator="method_type"),
]

_Amount = Annotated[Decimal, Field(gt=0, max_digits=20, decimal_places=8)]
_Price = Annotated[Decimal, Field(gt=0, max_digits=20, decimal_places=2)]


class CreateOfferRequest(BaseModel):
    total_amount: _Amount
    unit_price: _Price
    min_trade_amount: _Amount
    max_trade_amount: _Amount
    payment_details: PaymentDetails | None = None
    terms: str | None = Field(None, max_length=1000)


class TradeRequest(BaseModel):
    trade_amount: _Amount


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class OfferResponse(BaseModel):
    id: str
    owner_id: str
    side: str
    total_amount: Decimal
    remaining_amount: Decimal
    remaining_display: str
    unit_price: Decimal
    min_trade_amount: Decimal
    max_trade_amount: Decimal
    reference_price: Decimal
    status: str
    payment_details: dict[str, Any] | None = None
    terms: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_offer(cls, offer: Offer) -> "OfferResponse":
        return cls(
            id=offer.id,
            owner_id=offer.owner_id,
            side=offer.side.value,
            total_amount=offer.total_amount,
            remaining_amount=offer.remaining_amount,
            remaining_display=units_to_display(offer.remaining_amount, settings.COIN_SYMBOL),
            unit_price=offer.unit_price,
            min_trade_amount=offer.min_trade_amount,
            max_trade_amount=offer.max_trade_amount,
            reference_price=offer.reference_price,
            status=offer.status.value,
            payment_details=offer.payment_details,
            terms=offer.terms,
            created_at=offer.created_at,
            updated_at=offer.updated_at,
        )


class CancelOfferResponse(BaseModel):
    offer_id: str
    status: str
    released_amount: Decimal


class TradeSettlementResponse(BaseModel):
    trade_id: str
    offer_id: str
    side: str
    seller_id: str
    buyer_id: str
    amount: Decimal
    unit_price: Decimal
    fiat_total: Decimal
    offer_remaining: Decimal
    offer_status: str

    @classmethod
    def from_settlement(cls, s: TradeSettlement) -> "TradeSettlementResponse":
        return cls(
            trade_id=s.trade_id,
            offer_id=s.offer_id,
            side=s.side.value,
            seller_id=s.seller_id,
            buyer_id=s.buyer_id,
            amount=s.amount,
            unit_price=s.unit_price,
            fiat_total=s.fiat_total,
            offer_remaining=s.offer_remaining,
            offer_status=s.offer_status.value,
        )


class OfferListResponse(BaseModel):
    items: list[OfferResponse]
    next_cursor: str | None
    has_more: bool
