# Overview: Fixed-point currency helpers; money is stored as integer cents and never as float.

from __future__ import annotations

from decimal import Decimal, InvalidOperation

CENT = Decimal("0.01")

# Maximum price: $99,999,999.99 (money columns are BIGINT cents)
MAX_AMOUNT_CENTS = 9_999_999_999


class MoneyError(ValueError):
    """Raised when a value cannot be represented exactly as an amount in cents."""


def to_cents(value) -> int:
    """
    Convert a Decimal, integer or decimal string to integer cents, exactly.

    Floats are rejected: they cannot carry an exact two-digit fraction.
    More than two fractional digits is an error rather than a rounding.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise MoneyError("amount must be a decimal string, Decimal or integer, not a float")
    if isinstance(value, int):
        return value * 100
    if isinstance(value, str):
        value = value.strip()
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise MoneyError(f"invalid amount: {value!r}")
    if not amount.is_finite():
        raise MoneyError(f"invalid amount: {value!r}")
    cents = amount * 100
    if cents != cents.to_integral_value():
        raise MoneyError(f"amount {value!r} has more than two decimal places")
    return int(cents)


def cents_to_decimal(cents: int | None) -> Decimal | None:
    if cents is None:
        return None
    return (Decimal(cents) / 100).quantize(CENT)


def format_cents(cents: int | None) -> str | None:
    """Render cents as a plain decimal string, e.g. 2647 -> '26.47'."""
    amount = cents_to_decimal(cents)
    return str(amount) if amount is not None else None
