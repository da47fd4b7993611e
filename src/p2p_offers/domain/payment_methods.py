"""Payment details: a tagged variant checked against a per-method rule table.

Each method lists its required fields; fields with a pattern are matched
after all whitespace is removed. Unknown extra fields are dropped.
"""

import re
from dataclasses import dataclass
from typing import Any

from src.p2p_common.enums import PaymentMethodType
from src.p2p_common.errors import ValidationError

KENYAN_PHONE = re.compile(r"^(\+254|0)7\d{8}$")
ACCOUNT_NUMBER = re.compile(r"^\d{5,20}$")

_PHONE_HINT = "Invalid phone number. Use 07xxxxxxxx or +254xxxxxxxx"
_ACCOUNT_HINT = "Account number must be 5-20 digits"


@dataclass(frozen=True)
class FieldRule:
    name: str
    label: str
    pattern: re.Pattern[str] | None = None
    hint: str = ""


PAYMENT_METHOD_RULES: dict[PaymentMethodType, tuple[FieldRule, ...]] = {
    PaymentMethodType.MPESA_PERSONAL: (
        FieldRule("full_name", "Full name"),
        FieldRule("phone_number", "M-Pesa number", KENYAN_PHONE, _PHONE_HINT),
    ),
    PaymentMethodType.MPESA_PAYBILL: (
        FieldRule("paybill_number", "Paybill number"),
        FieldRule("account_number", "Account number", ACCOUNT_NUMBER, _ACCOUNT_HINT),
    ),
    PaymentMethodType.BANK_TRANSFER: (
        FieldRule("bank_name", "Bank name"),
        FieldRule("account_number", "Account number", ACCOUNT_NUMBER, _ACCOUNT_HINT),
    ),
    PaymentMethodType.AIRTEL_MONEY: (
        FieldRule("airtel_money_number", "Airtel Money number", KENYAN_PHONE, _PHONE_HINT),
    ),
}


def validate_payment_details(details: dict[str, Any]) -> dict[str, str]:
    """Check ``details`` against its method's rules and return a normalised copy.

    Raises ValidationError naming ``payment_details.<field>`` on the first
    missing or malformed field.
    """
    raw_method = details.get("method_type")
    try:
        method = PaymentMethodType(raw_method)
    except ValueError:
        raise ValidationError(
            "payment_details.method_type", f"Unsupported payment method: {raw_method}"
        ) from None

    clean: dict[str, str] = {"method_type": method.value}
    for rule in PAYMENT_METHOD_RULES[method]:
        value = str(details.get(rule.name) or "").strip()
        field = f"payment_details.{rule.name}"
        if not value:
            raise ValidationError(field, f"{rule.label} is required")
        if rule.pattern is not None:
            value = re.sub(r"\s", "", value)
            if not rule.pattern.match(value):
                raise ValidationError(field, rule.hint)
        clean[rule.name] = value
    return clean
