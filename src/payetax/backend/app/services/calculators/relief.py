"""Consolidated Relief Allowance formulas."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from payetax.backend.app.models.domain import ReliefBreakdown
from payetax.backend.config.scheme_config import ReliefConfig

if TYPE_CHECKING:  # pragma: no cover - typing only
    from payetax.backend.app.services.schemes import TaxScheme


def flat_floor_relief(annual_gross: Decimal, relief: ReliefConfig) -> ReliefBreakdown:
    """``fixed_amount + gross_rate * annual_gross``; the fixed part never scales."""

    fixed = relief.fixed_amount
    percentage = relief.gross_rate * annual_gross
    return ReliefBreakdown(
        fixed_or_floor_component=fixed,
        percentage_component=percentage,
        total=fixed + percentage,
    )


def scaled_floor_relief(annual_gross: Decimal, relief: ReliefConfig) -> ReliefBreakdown:
    """``max(fixed_amount, floor_rate * annual_gross) + gross_rate * annual_gross``."""

    floor_rate = relief.floor_rate
    if floor_rate is None:
        return flat_floor_relief(annual_gross, relief)

    floor = max(relief.fixed_amount, floor_rate * annual_gross)
    percentage = relief.gross_rate * annual_gross
    return ReliefBreakdown(
        fixed_or_floor_component=floor,
        percentage_component=percentage,
        total=floor + percentage,
    )


def calculate_relief(annual_gross: Decimal, scheme: TaxScheme) -> ReliefBreakdown:
    """Return the CRA for ``annual_gross`` under ``scheme``."""

    return scheme.relief(annual_gross)


__all__ = ["calculate_relief", "flat_floor_relief", "scaled_floor_relief"]
