"""Shared helpers for domain entities: identifiers, timestamps and decimal precision."""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import uuid4

ZERO = Decimal("0")

QUANTITY_EXP = Decimal("0.0001")
VALUE_EXP = Decimal("0.0001")
COST_EXP = Decimal("0.000001")


def new_id() -> str:
    """Generate a new entity identifier."""
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(UTC)


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """Coerce a number to Decimal without going through binary float artifacts."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def quantize_quantity(value: Decimal) -> Decimal:
    return to_decimal(value).quantize(QUANTITY_EXP, rounding=ROUND_HALF_UP)


def quantize_value(value: Decimal) -> Decimal:
    return to_decimal(value).quantize(VALUE_EXP, rounding=ROUND_HALF_UP)


def quantize_cost(value: Decimal) -> Decimal:
    return to_decimal(value).quantize(COST_EXP, rounding=ROUND_HALF_UP)
