"""p2p_mining REST API: claim the mining reward, read cooldown status."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.database import get_db_session
from src.p2p_common.response import ApiResponse, wrap
from src.p2p_gateway.auth.dependencies import get_current_user_id
from src.p2p_mining.application.service import ClaimService

router = APIRouter(prefix="/mining", tags=["mining"])

_service = ClaimService()


@router.post("/claim")
async def claim(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.claim(db, user_id)
    return wrap(request, data, message="Mining reward claimed")


@router.get("/status")
async def claim_status(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.status(db, user_id)
    return wrap(request, data)
