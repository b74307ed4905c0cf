"""Decimal helpers for money and day counts.

All amounts are carried as ``Decimal`` so repeated calculations are
bit-identical; rounding is half-up (never banker's rounding).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")
ONE = Decimal("1")


def to_decimal(value: Any, *, default: Decimal = ZERO) -> Decimal:
    """Coerce ints, floats, numeric strings and Decimals; anything else -> default."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    try:
        result = Decimal(str(value).strip().replace(",", ""))
    except (InvalidOperation, ValueError):
        return default
    return result if result.is_finite() else default


def round_half_up(value: Decimal) -> Decimal:
    """Round to the nearest whole unit, halves away from zero."""
    return value.quantize(ONE, rounding=ROUND_HALF_UP)


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def as_number(value: Decimal) -> int | float:
    """JSON-friendly number: ints stay ints, fractional values become floats."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)
