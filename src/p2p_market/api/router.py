"""p2p_market REST API: current reference price and the posting band."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.p2p_common.database import get_db_session
from src.p2p_common.response import ApiResponse, wrap
from src.p2p_common.units import PRICE_QUANT, price_band
from src.p2p_market.application.schemas import ReferencePriceResponse
from src.p2p_market.infrastructure.price_feed import PriceFeed

router = APIRouter(prefix="/market", tags=["market"])

_feed = PriceFeed()


@router.get("/price")
async def get_price(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    price = await _feed.get_reference_price(db)
    low, high = price_band(price, settings.PRICE_BAND_BPS)
    data = ReferencePriceResponse(
        price=price,
        band_low=low.quantize(PRICE_QUANT),
        band_high=high.quantize(PRICE_QUANT),
        band_bps=settings.PRICE_BAND_BPS,
    )
    return wrap(request, data)
