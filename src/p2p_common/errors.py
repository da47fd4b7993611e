"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Identity
  2xxx: Ledger / balances
  3xxx: Mining claims
  4xxx: Offers / trades / referrals
  9xxx: System
"""

from datetime import datetime
from decimal import Decimal
from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details
        super().__init__(message)


# --- 1xxx: Identity ---

class UnauthenticatedError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Missing or invalid caller identity", 401)


# --- 2xxx: Ledger ---

class ValidationError(AppError):
    """Input rule violated. ``field`` names the offending parameter."""

    def __init__(self, field: str, message: str, code: int = 2001) -> None:
        self.field = field
        super().__init__(code, message, 422, {"field": field})


class InvalidAmountError(ValidationError):
    def __init__(self, amount: Decimal, field: str = "amount") -> None:
        super().__init__(field, f"Amount must be positive, got {amount}", code=2002)


class InsufficientBalanceError(AppError):
    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            2003,
            f"Insufficient balance: required {required}, available {available}",
            422,
            {"required": str(required), "available": str(available)},
        )


class InsufficientLockedBalanceError(AppError):
    def __init__(self, required: Decimal, locked: Decimal) -> None:
        super().__init__(
            2004,
            f"Insufficient locked balance: required {required}, locked {locked}",
            409,
            {"required": str(required), "locked": str(locked)},
        )


# --- 3xxx: Mining ---

class ClaimNotReadyError(AppError):
    def __init__(self, remaining_seconds: int, next_claim_at: datetime | None) -> None:
        self.remaining_seconds = remaining_seconds
        self.next_claim_at = next_claim_at
        super().__init__(
            3001,
            f"Mining not available yet: {remaining_seconds}s remaining",
            429,
            {
                "time_remaining_seconds": remaining_seconds,
                "next_claim_at": next_claim_at.isoformat() if next_claim_at else None,
            },
        )


# --- 4xxx: Offers / trades / referrals ---

class NotFoundError(AppError):
    def __init__(self, kind: str, key: str) -> None:
        super().__init__(4001, f"{kind} not found: {key}", 404)


class InvalidStateError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(4002, message, 409)


class ForbiddenError(AppError):
    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(4003, message, 403)


class AmountOutOfBoundsError(ValidationError):
    def __init__(self, amount: Decimal, low: Decimal, high: Decimal) -> None:
        super().__init__(
            "trade_amount",
            f"Trade amount {amount} outside allowed range [{low}, {high}]",
            code=4004,
        )


class PaymentNotConfirmedError(AppError):
    def __init__(self, offer_id: str, amount: Decimal) -> None:
        super().__init__(
            4005, f"No payment confirmation for offer {offer_id} amount {amount}", 409
        )


# --- 9xxx: System ---

class PriceUnavailableError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Reference price unavailable", 503)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
