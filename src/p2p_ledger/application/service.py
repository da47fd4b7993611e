"""LedgerApplicationService: read-side composition for balances and history.

Both operations are read-only and run without an explicit transaction.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.p2p_common.units import units_to_display
from src.p2p_ledger.application.schemas import (
    BalanceResponse,
    TransactionHistoryResponse,
    TransactionItem,
    cursor_decode,
    cursor_encode,
)
from src.p2p_ledger.domain.store import LedgerStore


class LedgerApplicationService:
    def __init__(self, store: LedgerStore | None = None) -> None:
        self._store = store or LedgerStore()

    async def get_balance(self, db: AsyncSession, user_id: str) -> BalanceResponse:
        balance = await self._store.get_balance(db, user_id)
        return BalanceResponse.from_amounts(
            user_id=user_id,
            available=balance.available,
            locked=balance.locked,
        )

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
        kind: str | None,
    ) -> TransactionHistoryResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        records = await self._store.list_transactions(db, user_id, cursor_id, limit + 1, kind)
        has_more = len(records) > limit
        page = records[:limit]

        items = [
            TransactionItem(
                id=r.id,
                kind=r.kind,
                amount=r.amount,
                amount_display=units_to_display(r.amount, settings.COIN_SYMBOL),
                counterparty_offer_id=r.counterparty_offer_id,
                reference_id=r.reference_id,
                description=r.description,
                created_at=r.created_at.isoformat() if r.created_at else "",
            )
            for r in page
        ]

        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return TransactionHistoryResponse(items=items, next_cursor=next_cursor, has_more=has_more)
