from decimal import Decimal

from pydantic import BaseModel


class ReferencePriceResponse(BaseModel):
    price: Decimal
    band_low: Decimal
    band_high: Decimal
    band_bps: int
