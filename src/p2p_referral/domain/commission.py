"""Commission arithmetic: pure functions, no DB access.

Rates are basis points read from settings:
  TRADE_COMMISSION_BPS = 200  (2%)
  CLAIM_COMMISSION_BPS = 150  (1.5%)
"""

from decimal import Decimal

from config.settings import settings
from src.p2p_common.enums import CommissionSource
from src.p2p_common.units import apply_bps


def rate_bps(source: CommissionSource) -> int:
    if source == CommissionSource.TRADE:
        return settings.TRADE_COMMISSION_BPS
    return settings.CLAIM_COMMISSION_BPS


def calc_commission(base: Decimal, source: CommissionSource) -> Decimal:
    """floor(base x rate / 10000) to 8 places.

    >>> calc_commission(Decimal("100"), CommissionSource.TRADE)
    Decimal('2.00000000')
    >>> calc_commission(Decimal("0.73"), CommissionSource.CLAIM)
    Decimal('0.01095000')
    """
    return apply_bps(base, rate_bps(source))
