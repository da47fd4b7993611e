from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_account.application.service import ProfileApplicationService
from src.p2p_common.database import get_db_session
from src.p2p_common.response import ApiResponse, wrap
from src.p2p_gateway.auth.dependencies import get_current_user_id

router = APIRouter(prefix="/account", tags=["account"])

_service = ProfileApplicationService()


@router.get("/profile")
async def get_profile(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_profile(db, user_id)
    return wrap(request, data)
