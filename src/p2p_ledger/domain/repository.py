"""Repository Protocol: dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_ledger.domain.models import FundEntry, TransactionRecord


class LedgerRepositoryProtocol(Protocol):
    async def acquire_owner_lock(self, db: AsyncSession, owner_id: str) -> None: ...

    async def sum_by_status(
        self, db: AsyncSession, owner_id: str, status: str
    ) -> Decimal: ...

    async def sum_balances(
        self, db: AsyncSession, owner_id: str
    ) -> tuple[Decimal, Decimal]: ...

    async def list_entries(
        self,
        db: AsyncSession,
        owner_id: str,
        status: str,
        escrow_ref: str | None = None,
    ) -> list[FundEntry]: ...

    async def insert_entry(
        self,
        db: AsyncSession,
        owner_id: str,
        amount: Decimal,
        status: str,
        origin: str,
        escrow_ref: str | None = None,
        parent_id: int | None = None,
    ) -> FundEntry: ...

    async def transition(
        self,
        db: AsyncSession,
        entry_ids: list[int],
        from_status: str,
        to_status: str,
        escrow_ref: str | None,
    ) -> int: ...

    async def append_transaction(
        self,
        db: AsyncSession,
        actor_id: str,
        kind: str,
        amount: Decimal,
        counterparty_offer_id: str | None = None,
        reference_id: str | None = None,
        description: str | None = None,
    ) -> TransactionRecord: ...

    async def list_transactions(
        self,
        db: AsyncSession,
        actor_id: str,
        cursor_id: int | None,
        limit: int,
        kind: str | None,
    ) -> list[TransactionRecord]: ...
