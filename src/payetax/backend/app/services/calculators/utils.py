"""Utility helpers for calculator modules."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

MONTHS_PER_YEAR = Decimal("12")
ONE_HUNDRED = Decimal("100")

_CENT = Decimal("0.01")
_RATE_STEP = Decimal("0.0001")


def format_percentage(value: Decimal) -> str:
    """Return a human-readable percentage label for the fraction ``value``."""

    percentage = value * ONE_HUNDRED
    if percentage == percentage.to_integral_value():
        return f"{int(percentage)}%"
    return f"{percentage:.2f}%"


def percent_of(base: Decimal, rate_percent: Decimal) -> Decimal:
    """Apply a percentage expressed on the 0-100 scale."""

    return base * rate_percent / ONE_HUNDRED


def round_currency(value: Decimal) -> Decimal:
    """Round monetary amounts to two decimals."""

    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def round_rate(value: Decimal) -> Decimal:
    """Round rate values to four decimals."""

    return value.quantize(_RATE_STEP, rounding=ROUND_HALF_UP)
