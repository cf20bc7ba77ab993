"""Employee and employer pension contribution calculator."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from payetax.backend.app.errors import ValidationError
from payetax.backend.app.models.domain import PensionContribution, SalaryComposition, to_money

from .utils import ONE_HUNDRED, percent_of

if TYPE_CHECKING:  # pragma: no cover - typing only
    from payetax.backend.app.services.schemes import TaxScheme


def _resolve_rate(value: Decimal | float | str | None, default: Decimal, field: str) -> Decimal:
    if value is None:
        return default
    rate = to_money(value, field)
    if rate < 0 or rate > ONE_HUNDRED:
        raise ValidationError(f"'{field}' must be between 0 and 100", field=field)
    return rate


def calculate_pension_contribution(
    composition: SalaryComposition,
    scheme: TaxScheme,
    employee_rate: Decimal | float | str | None = None,
    employer_rate: Decimal | float | str | None = None,
) -> PensionContribution:
    """Split pension contributions on the scheme's pensionable emolument."""

    defaults = scheme.pension_defaults
    employee = _resolve_rate(employee_rate, defaults.employee_rate, "employee_rate")
    employer = _resolve_rate(employer_rate, defaults.employer_rate, "employer_rate")
    base = scheme.pensionable_emolument(composition)

    return PensionContribution(
        pensionable_emolument=base,
        employee_rate=employee,
        employer_rate=employer,
        employee_monthly=percent_of(base, employee),
        employer_monthly=percent_of(base, employer),
    )


__all__ = ["calculate_pension_contribution"]
