"""LedgerStore: balance arithmetic over immutable fund entries.

Balances are never stored; they are sums over entries by status. Moving funds
between states transitions whole entries oldest-first. When the last selected
entry is larger than needed it is split: the original becomes ``split`` and
two children carry the moved part and the untouched remainder.

Transaction ownership: the CALLER commits or rolls back. Every mutating method
first takes the per-owner lock so concurrent calls for one user serialise.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.enums import FundOrigin, FundStatus, TransactionKind
from src.p2p_common.errors import (
    InsufficientBalanceError,
    InsufficientLockedBalanceError,
    InternalError,
    InvalidAmountError,
)
from src.p2p_ledger.domain.models import Balance, FundEntry, TransactionRecord
from src.p2p_ledger.domain.repository import LedgerRepositoryProtocol
from src.p2p_ledger.infrastructure.persistence import LedgerRepository

logger = logging.getLogger(__name__)


def _require_positive(amount: Decimal) -> None:
    if amount <= 0:
        raise InvalidAmountError(amount)


class LedgerStore:
    def __init__(self, repo: LedgerRepositoryProtocol | None = None) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_available_balance(self, db: AsyncSession, user_id: str) -> Decimal:
        return await self._repo.sum_by_status(db, user_id, FundStatus.AVAILABLE)

    async def get_balance(self, db: AsyncSession, user_id: str) -> Balance:
        available, locked = await self._repo.sum_balances(db, user_id)
        return Balance(user_id=user_id, available=available, locked=locked)

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        kind: str | None,
    ) -> list[TransactionRecord]:
        return await self._repo.list_transactions(db, user_id, cursor_id, limit, kind)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def credit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: Decimal,
        origin: FundOrigin,
        status: FundStatus = FundStatus.AVAILABLE,
    ) -> int:
        _require_positive(amount)
        entry = await self._repo.insert_entry(db, user_id, amount, status, origin)
        return entry.id

    async def lock(
        self,
        db: AsyncSession,
        user_id: str,
        amount: Decimal,
        escrow_ref: str | None = None,
    ) -> list[int]:
        """available -> locked, oldest-first. Raises InsufficientBalanceError."""
        _require_positive(amount)
        await self._repo.acquire_owner_lock(db, user_id)
        entries = await self._repo.list_entries(db, user_id, FundStatus.AVAILABLE)
        available = sum((e.amount for e in entries), Decimal(0))
        if available < amount:
            raise InsufficientBalanceError(amount, available)
        return await self._move(
            db, entries, amount, FundStatus.AVAILABLE, FundStatus.LOCKED, escrow_ref
        )

    async def unlock(
        self,
        db: AsyncSession,
        user_id: str,
        amount: Decimal,
        escrow_ref: str | None = None,
    ) -> list[int]:
        """locked -> available, oldest-first, restricted to ``escrow_ref`` if given."""
        _require_positive(amount)
        await self._repo.acquire_owner_lock(db, user_id)
        entries = await self._repo.list_entries(db, user_id, FundStatus.LOCKED, escrow_ref)
        locked = sum((e.amount for e in entries), Decimal(0))
        if locked < amount:
            logger.error(
                "Unlock exceeds locked funds: user=%s ref=%s required=%s locked=%s",
                user_id, escrow_ref, amount, locked,
            )
            raise InsufficientLockedBalanceError(amount, locked)
        return await self._move(
            db, entries, amount, FundStatus.LOCKED, FundStatus.AVAILABLE, None
        )

    async def consume(
        self,
        db: AsyncSession,
        user_id: str,
        amount: Decimal,
        escrow_ref: str,
    ) -> list[int]:
        """locked -> spent for a settled escrow. The funds leave the owner for good."""
        _require_positive(amount)
        await self._repo.acquire_owner_lock(db, user_id)
        entries = await self._repo.list_entries(db, user_id, FundStatus.LOCKED, escrow_ref)
        locked = sum((e.amount for e in entries), Decimal(0))
        if locked < amount:
            raise InsufficientLockedBalanceError(amount, locked)
        return await self._move(
            db, entries, amount, FundStatus.LOCKED, FundStatus.SPENT, escrow_ref
        )

    async def record(
        self,
        db: AsyncSession,
        actor_id: str,
        kind: TransactionKind,
        amount: Decimal,
        counterparty_offer_id: str | None = None,
        reference_id: str | None = None,
        description: str | None = None,
    ) -> TransactionRecord:
        return await self._repo.append_transaction(
            db,
            actor_id,
            kind,
            amount,
            counterparty_offer_id=counterparty_offer_id,
            reference_id=reference_id,
            description=description,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _move(
        self,
        db: AsyncSession,
        entries: list[FundEntry],
        amount: Decimal,
        from_status: FundStatus,
        to_status: FundStatus,
        to_ref: str | None,
    ) -> list[int]:
        """Transition ``amount`` worth of ``entries`` (oldest first) to ``to_status``."""
        remaining = amount
        whole: list[int] = []
        partial: FundEntry | None = None
        for entry in entries:
            if remaining <= 0:
                break
            if entry.amount <= remaining:
                whole.append(entry.id)
                remaining -= entry.amount
            else:
                partial = entry
                break

        moved = list(whole)
        if whole:
            count = await self._repo.transition(db, whole, from_status, to_status, to_ref)
            if count != len(whole):
                raise InternalError(
                    f"Fund entries changed concurrently: expected {len(whole)}, moved {count}"
                )
        if partial is not None:
            moved.append(
                await self._split(db, partial, remaining, from_status, to_status, to_ref)
            )
        return moved

    async def _split(
        self,
        db: AsyncSession,
        entry: FundEntry,
        amount: Decimal,
        from_status: FundStatus,
        to_status: FundStatus,
        to_ref: str | None,
    ) -> int:
        """Retire ``entry`` as split; returns the id of the moved child."""
        count = await self._repo.transition(
            db, [entry.id], from_status, FundStatus.SPLIT, entry.escrow_ref
        )
        if count != 1:
            raise InternalError(f"Fund entry {entry.id} changed concurrently")
        moved = await self._repo.insert_entry(
            db, entry.owner_id, amount, to_status, entry.origin,
            escrow_ref=to_ref, parent_id=entry.id,
        )
        await self._repo.insert_entry(
            db, entry.owner_id, entry.amount - amount, from_status, entry.origin,
            escrow_ref=entry.escrow_ref, parent_id=entry.id,
        )
        return moved.id
