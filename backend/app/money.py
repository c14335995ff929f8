"""Exact decimal arithmetic for single-currency amounts.

Amounts are held as ``Decimal`` end to end and quantized to cents only at
the boundaries (persisting, comparing totals, rendering).
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Union

from app.errors import ValidationError

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

Amount = Union[Decimal, int, float, str]


def to_money(value: Amount, field_name: str = "amount") -> Decimal:
    """Convert to a cent-quantized Decimal. Floats go through ``str`` to avoid binary drift."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        if isinstance(value, float):
            value = Decimal(str(value))
        elif not isinstance(value, Decimal):
            value = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number, got {value!r}")
    if not value.is_finite():
        raise ValidationError(f"{field_name} must be finite")
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def require_positive(value: Amount, field_name: str) -> Decimal:
    money = to_money(value, field_name)
    if money <= ZERO:
        raise ValidationError(f"{field_name} must be greater than 0")
    return money


def line_total(unit_price: Amount, quantity: int) -> Decimal:
    return to_money(to_money(unit_price) * quantity)


def money_sum(values: Iterable[Amount]) -> Decimal:
    total = ZERO
    for value in values:
        total += to_money(value)
    return total
