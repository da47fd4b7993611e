"""p2p_offers REST endpoints.

POST /offers/sell               post a sell offer (locks total_amount in escrow)
POST /offers/buy                post a buy offer
GET  /offers                    open offers, newest first, cursor pagination
GET  /offers/mine               caller's own offers
GET  /offers/{offer_id}         one offer
POST /offers/{offer_id}/cancel  cancel, releasing remaining escrow
POST /offers/{offer_id}/trades  take part or all of an offer
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.database import get_db_session
from src.p2p_common.enums import OfferSide, OfferStatus
from src.p2p_common.response import ApiResponse, wrap
from src.p2p_gateway.auth.dependencies import get_current_user_id
from src.p2p_market.infrastructure.price_feed import PriceFeed
from src.p2p_offers.application.schemas import CreateOfferRequest, TradeRequest
from src.p2p_offers.application.service import OfferBookService

router = APIRouter(prefix="/offers", tags=["offers"])

_service = OfferBookService()
_feed = PriceFeed()


@router.post("/sell", status_code=201)
async def create_sell_offer(
    body: CreateOfferRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    reference_price = await _feed.get_reference_price(db)
    data = await _service.create_sell_offer(db, user_id, body, reference_price)
    return wrap(request, data, message="Sell offer posted")


@router.post("/buy", status_code=201)
async def create_buy_offer(
    body: CreateOfferRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    reference_price = await _feed.get_reference_price(db)
    data = await _service.create_buy_offer(db, user_id, body, reference_price)
    return wrap(request, data, message="Buy offer posted")


@router.get("")
async def list_open_offers(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    side: OfferSide | None = Query(None),
    cursor: str | None = Query(None, description="Pagination cursor (offer ID)"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_open_offers(db, side, cursor, limit)
    return wrap(request, data)


@router.get("/mine")
async def list_my_offers(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: OfferStatus | None = Query(None),
    cursor: str | None = Query(None, description="Pagination cursor (offer ID)"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_my_offers(db, user_id, status, cursor, limit)
    return wrap(request, data)


@router.get("/{offer_id}")
async def get_offer(
    offer_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_offer(db, offer_id)
    return wrap(request, data)


@router.post("/{offer_id}/cancel")
async def cancel_offer(
    offer_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.cancel_offer(db, offer_id, user_id)
    return wrap(request, data, message="Offer cancelled")


@router.post("/{offer_id}/trades")
async def match_trade(
    offer_id: str,
    body: TradeRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.match_trade(db, offer_id, user_id, body.trade_amount)
    return wrap(request, data, message="Trade settled")
