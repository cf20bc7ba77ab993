"""Progressive band walk shared by every tax scheme."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from payetax.backend.app.models.domain import ZERO, BandAllocation, ProgressiveTaxResult
from payetax.backend.config.scheme_config import TaxBand


def calculate_progressive_tax(
    taxable_income: Decimal, bands: Sequence[TaxBand]
) -> ProgressiveTaxResult:
    """Consume ``taxable_income`` across ``bands`` from the lowest band upwards.

    Each band takes ``min(remaining, width)``; the open-ended final band takes
    whatever is left. Bands that receive nothing are left out of the
    breakdown, so a zero income produces an empty ``per_band`` tuple. Band
    boundaries are inclusive at the bottom and exclusive at the top: an income
    of exactly 300,000 fills the first 300,000-wide band and stops there.
    """

    remaining = taxable_income if taxable_income > 0 else ZERO
    total_tax = ZERO
    allocations: list[BandAllocation] = []

    for band in bands:
        if remaining <= 0:
            break

        if band.width is None:
            consumed = remaining
        else:
            consumed = min(remaining, band.width)

        tax = consumed * band.rate
        total_tax += tax
        remaining -= consumed
        allocations.append(
            BandAllocation(
                label=band.label,
                rate=band.rate,
                taxable_amount=consumed,
                tax=tax,
            )
        )

    return ProgressiveTaxResult(total_tax=total_tax, per_band=tuple(allocations))


__all__ = ["calculate_progressive_tax"]
