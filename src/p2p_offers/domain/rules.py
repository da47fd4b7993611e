"""Offer posting and trade-size rules: pure functions, no DB access.

Checked in order, first failure wins:
  1. total_amount >= MIN_POST_AMOUNT
  2. min_trade_amount >= MIN_TRADE_AMOUNT
  3. min_trade_amount <= max_trade_amount
  4. max_trade_amount <= total_amount
  5. unit_price within the inclusive band around the reference price
"""

from dataclasses import dataclass
from decimal import Decimal

from config.settings import settings
from src.p2p_common.errors import AmountOutOfBoundsError, ValidationError
from src.p2p_common.units import price_band
from src.p2p_offers.domain.models import Offer


@dataclass(frozen=True)
class OfferLimits:
    min_post_amount: Decimal
    min_trade_amount: Decimal
    price_band_bps: int

    @classmethod
    def from_settings(cls) -> "OfferLimits":
        return cls(
            min_post_amount=settings.MIN_POST_AMOUNT,
            min_trade_amount=settings.MIN_TRADE_AMOUNT,
            price_band_bps=settings.PRICE_BAND_BPS,
        )


def validate_offer_terms(
    total_amount: Decimal,
    unit_price: Decimal,
    min_trade_amount: Decimal,
    max_trade_amount: Decimal,
    reference_price: Decimal,
    limits: OfferLimits,
) -> None:
    if total_amount < limits.min_post_amount:
        raise ValidationError(
            "total_amount", f"Minimum amount to post is {limits.min_post_amount}"
        )
    if min_trade_amount < limits.min_trade_amount:
        raise ValidationError(
            "min_trade_amount", f"Minimum trade amount is {limits.min_trade_amount}"
        )
    if min_trade_amount > max_trade_amount:
        raise ValidationError(
            "max_trade_amount", "Maximum trade amount must not be below the minimum"
        )
    if max_trade_amount > total_amount:
        raise ValidationError(
            "max_trade_amount", "Maximum trade amount cannot exceed the total amount"
        )
    if reference_price <= 0:
        raise ValidationError("reference_price", "Reference price must be positive")
    low, high = price_band(reference_price, limits.price_band_bps)
    if not (low <= unit_price <= high):
        raise ValidationError(
            "unit_price", f"Price must be within [{low:.2f}, {high:.2f}]"
        )


def check_trade_amount(offer: Offer, amount: Decimal) -> None:
    """Raise AmountOutOfBoundsError unless min_trade_amount <= amount <= remaining_amount.

    ``max_trade_amount`` is advertised to takers but not enforced per trade.
    """
    if amount <= 0 or amount < offer.min_trade_amount or amount > offer.remaining_amount:
        raise AmountOutOfBoundsError(amount, offer.min_trade_amount, offer.remaining_amount)
