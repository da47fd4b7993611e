"""p2p_referral REST API: referral dashboard and signup hook, JWT required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.database import get_db_session
from src.p2p_common.response import ApiResponse, wrap
from src.p2p_gateway.auth.dependencies import get_current_user_id
from src.p2p_referral.application.schemas import LinkReferrerRequest
from src.p2p_referral.application.service import ReferralApplicationService

router = APIRouter(prefix="/referrals", tags=["referrals"])

_service = ReferralApplicationService()


@router.get("/summary")
async def get_summary(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_summary(db, user_id)
    return wrap(request, data)


@router.post("/link")
async def link_referrer(
    body: LinkReferrerRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.link_referrer(db, user_id, body.referral_code)
    return wrap(request, data, message="Referrer linked")
