"""EscrowManager: moves funds into, out of, and through escrow.

    open_sell_escrow   available -> locked            + escrow_lock record
    release            locked    -> available         + escrow_release record
    settle             locked    -> spent (seller)
                       new available entry (buyer)    + trade_sell / trade_buy records

Settlement never credits the seller on-ledger: the seller is paid in fiat
off-ledger and that payment is confirmed before settle is called.

Transaction ownership: the CALLER commits or rolls back.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.enums import FundOrigin, TransactionKind
from src.p2p_escrow.domain.models import EscrowRef
from src.p2p_ledger.domain.store import LedgerStore

logger = logging.getLogger(__name__)


class EscrowManager:
    def __init__(self, store: LedgerStore | None = None) -> None:
        self._store = store or LedgerStore()

    async def open_sell_escrow(
        self,
        db: AsyncSession,
        user_id: str,
        amount: Decimal,
        ref: str,
        offer_id: str | None = None,
    ) -> EscrowRef:
        """Lock ``amount`` of the user's funds under ``ref``.

        Raises whatever LedgerStore.lock raises (InsufficientBalanceError,
        InvalidAmountError); nothing is locked in that case.
        """
        entry_ids = await self._store.lock(db, user_id, amount, escrow_ref=ref)
        escrow = EscrowRef(
            ref=ref,
            owner_id=user_id,
            amount=amount,
            offer_id=offer_id,
            entry_ids=tuple(entry_ids),
        )
        await self._store.record(
            db,
            user_id,
            TransactionKind.ESCROW_LOCK,
            amount,
            counterparty_offer_id=escrow.offer,
            reference_id=ref,
            description="Funds locked in escrow",
        )
        logger.debug("Escrow opened: ref=%s owner=%s amount=%s", ref, user_id, amount)
        return escrow

    async def release(self, db: AsyncSession, escrow: EscrowRef, amount: Decimal) -> None:
        await self._store.unlock(db, escrow.owner_id, amount, escrow_ref=escrow.ref)
        await self._store.record(
            db,
            escrow.owner_id,
            TransactionKind.ESCROW_RELEASE,
            amount,
            counterparty_offer_id=escrow.offer,
            reference_id=escrow.ref,
            description="Escrow released",
        )
        logger.debug("Escrow released: ref=%s amount=%s", escrow.ref, amount)

    async def settle(
        self,
        db: AsyncSession,
        escrow: EscrowRef,
        amount: Decimal,
        beneficiary_id: str,
        trade_id: str,
    ) -> int:
        """Pay ``amount`` out of the escrow to the buyer. Returns the buyer's entry id."""
        await self._store.consume(db, escrow.owner_id, amount, escrow.ref)
        entry_id = await self._store.credit(db, beneficiary_id, amount, FundOrigin.TRADE)
        await self._store.record(
            db,
            escrow.owner_id,
            TransactionKind.TRADE_SELL,
            amount,
            counterparty_offer_id=escrow.offer,
            reference_id=trade_id,
            description=f"Sold to {beneficiary_id}",
        )
        await self._store.record(
            db,
            beneficiary_id,
            TransactionKind.TRADE_BUY,
            amount,
            counterparty_offer_id=escrow.offer,
            reference_id=trade_id,
            description=f"Bought from {escrow.owner_id}",
        )
        logger.debug(
            "Escrow settled: ref=%s amount=%s buyer=%s trade=%s",
            escrow.ref, amount, beneficiary_id, trade_id,
        )
        return entry_id
