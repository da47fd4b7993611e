"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class FundStatus(str, Enum):
    AVAILABLE = "available"
    LOCKED = "locked"
    SPENT = "spent"  # escrow consumed by a settlement (terminal)
    SPLIT = "split"  # replaced by two child entries (terminal)


class FundOrigin(str, Enum):
    MINING = "mining"
    TRADE = "trade"
    REFERRAL_COMMISSION = "referral_commission"


class TransactionKind(str, Enum):
    MINING = "mining"
    ESCROW_LOCK = "escrow_lock"
    ESCROW_RELEASE = "escrow_release"
    TRADE_BUY = "trade_buy"
    TRADE_SELL = "trade_sell"
    REFERRAL_COMMISSION = "referral_commission"


class OfferSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OfferStatus(str, Enum):
    OPEN = "open"
    FILLED = "filled"
    CANCELLED = "cancelled"


class CommissionSource(str, Enum):
    TRADE = "trade"
    CLAIM = "claim"


class PaymentMethodType(str, Enum):
    MPESA_PERSONAL = "mpesa_personal"
    MPESA_PAYBILL = "mpesa_paybill"
    BANK_TRANSFER = "bank_transfer"
    AIRTEL_MONEY = "airtel_money"
