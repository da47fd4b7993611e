"""Domain models for p2p_ledger: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class FundEntry:
    id: int                          # BIGSERIAL
    owner_id: str
    amount: Decimal                  # > 0, never mutated
    status: str                      # FundStatus value
    origin: str                      # FundOrigin value
    escrow_ref: str | None = None    # escrow holding a locked/spent entry
    parent_id: int | None = None     # entry this one was split from
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Balance:
    user_id: str
    available: Decimal
    locked: Decimal

    @property
    def total(self) -> Decimal:
        return self.available + self.locked


@dataclass
class TransactionRecord:
    id: int                          # BIGSERIAL
    actor_id: str
    kind: str                        # TransactionKind value
    amount: Decimal
    counterparty_offer_id: str | None = None
    reference_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None
