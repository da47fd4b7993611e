"""Decimal arithmetic utilities for coin amounts and fiat prices.

Coin amounts carry 8 decimal places, prices 2. Never float.
"""

from decimal import ROUND_DOWN, Decimal

UNIT_QUANT = Decimal("0.00000001")
PRICE_QUANT = Decimal("0.01")
_BPS = Decimal(10000)


def to_units(value: Decimal | int | str) -> Decimal:
    """Normalise a coin amount to 8 places, truncating any excess precision."""
    return Decimal(value).quantize(UNIT_QUANT, rounding=ROUND_DOWN)


def units_to_display(amount: Decimal, symbol: str = "AFX") -> str:
    """Format a coin amount: Decimal('1234.5') -> '1,234.50 AFX'."""
    return f"{amount.quantize(PRICE_QUANT, rounding=ROUND_DOWN):,} {symbol}"


def apply_bps(amount: Decimal, bps: int) -> Decimal:
    """amount x bps / 10000, truncated to 8 places (the platform never over-issues)."""
    if amount == 0 or bps == 0:
        return Decimal(0).quantize(UNIT_QUANT)
    return (amount * bps / _BPS).quantize(UNIT_QUANT, rounding=ROUND_DOWN)


def price_band(reference_price: Decimal, band_bps: int) -> tuple[Decimal, Decimal]:
    """Inclusive [low, high] band of ``band_bps`` around the reference price."""
    low = reference_price * (_BPS - band_bps) / _BPS
    high = reference_price * (_BPS + band_bps) / _BPS
    return low, high
