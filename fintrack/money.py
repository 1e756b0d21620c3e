"""
Amount handling.

Amounts are rounded half-up to cents and stored as integers so that applying
and reversing a balance effect is exact.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from fintrack.config import CENTS_PER_UNIT, MAX_AMOUNT
from fintrack.errors import ValidationError

_CENT = Decimal("0.01")


def to_cents(amount) -> int:
    """Convert a numeric amount to integer cents."""
    if isinstance(amount, bool):
        raise ValidationError(f"Invalid amount: {amount!r}")
    try:
        value = Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"Invalid amount: {amount!r}") from None
    if not value.is_finite():
        raise ValidationError(f"Invalid amount: {amount!r}")
    return int(value * CENTS_PER_UNIT)


def from_cents(cents: int) -> float:
    """Convert integer cents back to a float amount."""
    return cents / CENTS_PER_UNIT


def positive_cents(amount, field: str = "amount") -> int:
    """Validate a strictly positive amount and return it in cents."""
    if amount is None:
        raise ValidationError(f"{field} is required")
    cents = to_cents(amount)
    if cents <= 0:
        raise ValidationError(f"{field} must be positive, got {amount}")
    if cents > to_cents(MAX_AMOUNT):
        raise ValidationError(f"{field} exceeds the maximum of {MAX_AMOUNT:,.2f}")
    return cents
