"""p2p_ledger REST API: balance and transaction history, JWT required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.database import get_db_session
from src.p2p_common.enums import TransactionKind
from src.p2p_common.response import ApiResponse, wrap
from src.p2p_gateway.auth.dependencies import get_current_user_id
from src.p2p_ledger.application.service import LedgerApplicationService

router = APIRouter(prefix="/account", tags=["account"])

_service = LedgerApplicationService()


@router.get("/balance")
async def get_balance(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(db, user_id)
    return wrap(request, data)


@router.get("/transactions")
async def list_transactions(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    kind: TransactionKind | None = Query(None, description="Filter by transaction kind"),
) -> ApiResponse:
    data = await _service.list_transactions(
        db, user_id, cursor, limit, kind.value if kind else None
    )
    return wrap(request, data)
