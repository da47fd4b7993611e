"""Pydantic schemas and cursor utilities for p2p_ledger API."""

import base64
import json
from decimal import Decimal

from pydantic import BaseModel

from config.settings import settings
from src.p2p_common.units import units_to_display

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except (ValueError, KeyError, TypeError):
        return None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    user_id: str
    available_balance: Decimal
    available_balance_display: str
    locked_balance: Decimal
    locked_balance_display: str
    total_balance: Decimal
    total_balance_display: str

    @classmethod
    def from_amounts(
        cls,
        user_id: str,
        available: Decimal,
        locked: Decimal,
    ) -> "BalanceResponse":
        symbol = settings.COIN_SYMBOL
        return cls(
            user_id=user_id,
            available_balance=available,
            available_balance_display=units_to_display(available, symbol),
            locked_balance=locked,
            locked_balance_display=units_to_display(locked, symbol),
            total_balance=available + locked,
            total_balance_display=units_to_display(available + locked, symbol),
        )


class TransactionItem(BaseModel):
    id: int
    kind: str
    amount: Decimal
    amount_display: str
    counterparty_offer_id: str | None
    reference_id: str | None
    description: str | None
    created_at: str  # ISO8601 string


class TransactionHistoryResponse(BaseModel):
    items: list[TransactionItem]
    next_cursor: str | None
    has_more: bool
