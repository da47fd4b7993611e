"""LedgerRepository: concrete implementation of LedgerRepositoryProtocol.

Per-owner serialisation uses a transaction-scoped advisory lock, so two
requests touching the same user's funds queue up instead of both reading the
pre-mutation state. Status transitions are conditioned on the expected
current status; the caller checks the affected row count.

Transaction ownership: The CALLER (application service) is responsible for
committing or rolling back.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.p2p_common.errors import InternalError
from src.p2p_ledger.domain.models import FundEntry, TransactionRecord

# ---------------------------------------------------------------------------
# SQL: fund_entries
# ---------------------------------------------------------------------------

_OWNER_LOCK_SQL = text("SELECT pg_advisory_xact_lock(hashtext(:owner_id))")

_SUM_BY_STATUS_SQL = text("""
    SELECT COALESCE(SUM(amount), 0) AS total
    FROM fund_entries
    WHERE owner_id = :owner_id AND status = :status
""")

_BALANCES_SQL = text("""
    SELECT
        COALESCE(SUM(amount) FILTER (WHERE status = 'available'), 0) AS available,
        COALESCE(SUM(amount) FILTER (WHERE status = 'locked'), 0) AS locked
    FROM fund_entries
    WHERE owner_id = :owner_id
""")

_ENTRY_COLUMNS = """
    id, owner_id, amount, status, origin, escrow_ref, parent_id, created_at, updated_at
"""

_LIST_ENTRIES_SQL = text(f"""
    SELECT {_ENTRY_COLUMNS}
    FROM fund_entries
    WHERE owner_id = :owner_id
      AND status = :status
      AND (CAST(:escrow_ref AS TEXT) IS NULL OR escrow_ref = :escrow_ref)
    ORDER BY created_at ASC, id ASC
    FOR UPDATE
""")

_INSERT_ENTRY_SQL = text(f"""
    INSERT INTO fund_entries (owner_id, amount, status, origin, escrow_ref, parent_id)
    VALUES (:owner_id, :amount, :status, :origin, :escrow_ref, :parent_id)
    RETURNING {_ENTRY_COLUMNS}
""")

_TRANSITION_SQL = text("""
    UPDATE fund_entries
    SET status = :to_status,
        escrow_ref = :escrow_ref,
        updated_at = NOW()
    WHERE id IN :ids AND status = :from_status
""").bindparams(bindparam("ids", expanding=True))

# ---------------------------------------------------------------------------
# SQL: transactions (append-only)
# ---------------------------------------------------------------------------

_TX_COLUMNS = """
    id, actor_id, kind, amount, counterparty_offer_id, reference_id, description, created_at
"""

_INSERT_TX_SQL = text(f"""
    INSERT INTO transactions
        (actor_id, kind, amount, counterparty_offer_id, reference_id, description)
    VALUES
        (:actor_id, :kind, :amount, :counterparty_offer_id, :reference_id, :description)
    RETURNING {_TX_COLUMNS}
""")

_LIST_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE actor_id = :actor_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
      AND (CAST(:kind AS TEXT) IS NULL OR kind = :kind)
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_entry(row: Any) -> FundEntry:
    return FundEntry(
        id=row.id,
        owner_id=row.owner_id,
        amount=Decimal(row.amount),
        status=row.status,
        origin=row.origin,
        escrow_ref=row.escrow_ref,
        parent_id=row.parent_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_tx(row: Any) -> TransactionRecord:
    return TransactionRecord(
        id=row.id,
        actor_id=row.actor_id,
        kind=row.kind,
        amount=Decimal(row.amount),
        counterparty_offer_id=row.counterparty_offer_id,
        reference_id=row.reference_id,
        description=row.description,
        created_at=row.created_at,
    )


class LedgerRepository:
    """Concrete repository: raw SQL, caller-owned transaction."""

    async def acquire_owner_lock(self, db: AsyncSession, owner_id: str) -> None:
        await db.execute(_OWNER_LOCK_SQL, {"owner_id": owner_id})

    async def sum_by_status(
        self, db: AsyncSession, owner_id: str, status: str
    ) -> Decimal:
        result = await db.execute(
            _SUM_BY_STATUS_SQL, {"owner_id": owner_id, "status": status}
        )
        return Decimal(result.scalar_one())

    async def sum_balances(
        self, db: AsyncSession, owner_id: str
    ) -> tuple[Decimal, Decimal]:
        """Returns (available, locked) read in a single statement."""
        result = await db.execute(_BALANCES_SQL, {"owner_id": owner_id})
        row = result.mappings().one()
        return Decimal(row["available"]), Decimal(row["locked"])

    async def list_entries(
        self,
        db: AsyncSession,
        owner_id: str,
        status: str,
        escrow_ref: str | None = None,
    ) -> list[FundEntry]:
        result = await db.execute(
            _LIST_ENTRIES_SQL,
            {"owner_id": owner_id, "status": status, "escrow_ref": escrow_ref},
        )
        return [_row_to_entry(row) for row in result.fetchall()]

    async def insert_entry(
        self,
        db: AsyncSession,
        owner_id: str,
        amount: Decimal,
        status: str,
        origin: str,
        escrow_ref: str | None = None,
        parent_id: int | None = None,
    ) -> FundEntry:
        result = await db.execute(
            _INSERT_ENTRY_SQL,
            {
                "owner_id": owner_id,
                "amount": amount,
                "status": status,
                "origin": origin,
                "escrow_ref": escrow_ref,
                "parent_id": parent_id,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Fund entry insert returned no rows: this should never happen")
        return _row_to_entry(row)

    async def transition(
        self,
        db: AsyncSession,
        entry_ids: list[int],
        from_status: str,
        to_status: str,
        escrow_ref: str | None,
    ) -> int:
        result = await db.execute(
            _TRANSITION_SQL,
            {
                "ids": entry_ids,
                "from_status": from_status,
                "to_status": to_status,
                "escrow_ref": escrow_ref,
            },
        )
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def append_transaction(
        self,
        db: AsyncSession,
        actor_id: str,
        kind: str,
        amount: Decimal,
        counterparty_offer_id: str | None = None,
        reference_id: str | None = None,
        description: str | None = None,
    ) -> TransactionRecord:
        result = await db.execute(
            _INSERT_TX_SQL,
            {
                "actor_id": actor_id,
                "kind": kind,
                "amount": amount,
                "counterparty_offer_id": counterparty_offer_id,
                "reference_id": reference_id,
                "description": description,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Transaction insert returned no rows: this should never happen")
        return _row_to_tx(row)

    async def list_transactions(
        self,
        db: AsyncSession,
        actor_id: str,
        cursor_id: int | None,
        limit: int,
        kind: str | None,
    ) -> list[TransactionRecord]:
        result = await db.execute(
            _LIST_TX_SQL,
            {"actor_id": actor_id, "cursor_id": cursor_id, "kind": kind, "limit": limit},
        )
        return [_row_to_tx(row) for row in result.fetchall()]
