"""Salary composition validation.

Percentages are the source of truth for percentage-driven compositions: each
component's value is re-derived from the gross on every validation so that a
changed gross never leaves stale amounts behind. Value-driven compositions
(every component given as an amount) derive their percentages instead and go
through the same 100% check. Components are looked up by the first word of
their name, so two components sharing that word are rejected.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from payetax.backend.app.errors import ValidationError
from payetax.backend.app.models.domain import (
    ZERO,
    SalaryComponent,
    SalaryComposition,
    to_money,
)

from .utils import ONE_HUNDRED

PERCENTAGE_TOLERANCE = Decimal("0.1")


def component_value(percentage: Decimal, gross_monthly: Decimal) -> Decimal:
    """Return the monthly amount a percentage of ``gross_monthly`` represents."""

    return gross_monthly * percentage / ONE_HUNDRED


def component_percentage(value: Decimal, gross_monthly: Decimal) -> Decimal:
    """Return the share of ``gross_monthly`` that ``value`` represents, in percent."""

    if gross_monthly <= 0:
        return ZERO
    return value / gross_monthly * ONE_HUNDRED


def _coerce_component(entry: SalaryComponent | Mapping[str, Any]) -> SalaryComponent:
    if isinstance(entry, SalaryComponent):
        return entry
    if isinstance(entry, Mapping):
        return SalaryComponent(
            name=str(entry.get("name", "")),
            percentage=entry.get("percentage"),
            value=entry.get("value"),
        )
    raise ValidationError("Salary components must be mappings or SalaryComponent objects")


def _require_positive_gross(gross_monthly: Decimal) -> Decimal:
    if gross_monthly <= 0:
        raise ValidationError(
            "Gross monthly income must be greater than zero", field="gross_monthly"
        )
    return gross_monthly


def _check_unique_keys(components: Sequence[SalaryComponent]) -> None:
    seen: dict[str, str] = {}
    for component in components:
        previous = seen.get(component.key)
        if previous is None:
            seen[component.key] = component.name
            continue
        raise ValidationError(
            f"Components '{previous}' and '{component.name}' share the key "
            f"'{component.key}'; rename one of them",
            field="components",
        )


def _check_total(total: Decimal) -> None:
    if abs(total - ONE_HUNDRED) > PERCENTAGE_TOLERANCE:
        raise ValidationError(
            f"Total component percentage is {total:.1f}%. It must be exactly 100%.",
            total=total,
            field="components",
        )


def validate_composition(
    components: Sequence[SalaryComponent | Mapping[str, Any]],
    gross_monthly: Decimal | float | int | str | None = None,
) -> SalaryComposition:
    """Validate ``components`` against ``gross_monthly`` and fill in derived fields."""

    parsed = tuple(_coerce_component(entry) for entry in components)
    _check_unique_keys(parsed)
    gross = None if gross_monthly is None else to_money(gross_monthly, "gross_monthly")

    if gross is not None:
        _require_positive_gross(gross)

    if not parsed:
        raise ValidationError(
            "Total component percentage is 0.0%. It must be exactly 100%.",
            total=ZERO,
            field="components",
        )

    percentage_driven = [component.is_percentage_driven for component in parsed]
    if any(percentage_driven) and not all(percentage_driven):
        raise ValidationError(
            "Salary components must all be percentage-driven or all value-driven",
            field="components",
        )

    if all(percentage_driven):
        if gross is None:
            raise ValidationError(
                "Gross monthly income is required for percentage-driven components",
                field="gross_monthly",
            )
        total = sum((component.percentage for component in parsed), ZERO)
        _check_total(total)
        resolved = tuple(
            SalaryComponent(
                name=component.name,
                percentage=component.percentage,
                value=component_value(component.percentage, gross),
            )
            for component in parsed
        )
        return SalaryComposition(gross_monthly=gross, components=resolved, total_percentage=total)

    values_total = sum((component.value for component in parsed), ZERO)
    gross = _require_positive_gross(gross if gross is not None else values_total)
    resolved = tuple(
        SalaryComponent(
            name=component.name,
            percentage=component_percentage(component.value, gross),
            value=component.value,
        )
        for component in parsed
    )
    total = sum((component.percentage for component in resolved), ZERO)
    _check_total(total)
    return SalaryComposition(gross_monthly=gross, components=resolved, total_percentage=total)


__all__ = [
    "PERCENTAGE_TOLERANCE",
    "component_percentage",
    "component_value",
    "validate_composition",
]
