"""Payroll tax engine entry point.

``calculate_payroll`` is a pure function: validation happens once at the top,
then the deduction, relief and band calculators run on trusted inputs and the
result is assembled without rounding. It holds no state between calls, so
batch runs may fan calls out over any executor.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import Executor
from decimal import Decimal
from typing import Any, Union

from payetax.backend.app.errors import ValidationError
from payetax.backend.app.models.domain import (
    CalculationResult,
    DeductionConfig,
    SalaryComponent,
    SalaryComposition,
)

from .calculators import (
    MONTHS_PER_YEAR,
    calculate_deductions,
    calculate_progressive_tax,
    calculate_relief,
    check_deduction_config,
    validate_composition,
)
from .schemes import TaxScheme, resolve_scheme

CompositionInput = Union[SalaryComposition, Sequence[Union[SalaryComponent, Mapping[str, Any]]]]
DeductionInput = Union[DeductionConfig, Mapping[str, Any], None]


def _validated_composition(
    composition: CompositionInput, gross_monthly: Decimal | float | int | str | None
) -> SalaryComposition:
    if isinstance(composition, SalaryComposition):
        gross = composition.gross_monthly if gross_monthly is None else gross_monthly
        return validate_composition(composition.components, gross)
    return validate_composition(composition, gross_monthly)


def _deduction_config(config: DeductionInput) -> DeductionConfig:
    if isinstance(config, DeductionConfig):
        return config
    return DeductionConfig.from_mapping(config)


def calculate_payroll(
    composition: CompositionInput,
    deduction_config: DeductionInput = None,
    scheme: TaxScheme | str | None = None,
    *,
    gross_monthly: Decimal | float | int | str | None = None,
) -> CalculationResult:
    """Compute deductions, relief, PAYE and net pay for one employee-month.

    Raises :class:`ValidationError` for bad percentage totals, non-positive
    gross income, out-of-range rates, negative amounts or an unknown scheme.
    """

    active_scheme = resolve_scheme(scheme)
    validated = _validated_composition(composition, gross_monthly)
    config = _deduction_config(deduction_config)
    check_deduction_config(config, active_scheme)

    gross = validated.gross_monthly
    annual_gross = gross * MONTHS_PER_YEAR

    deductions = calculate_deductions(validated, config, active_scheme)
    relief = calculate_relief(annual_gross, active_scheme)

    taxable_income = annual_gross - deductions.annual_total - relief.total
    if taxable_income < 0:
        taxable_income = Decimal("0")

    tax = calculate_progressive_tax(taxable_income, active_scheme.bands)
    monthly_tax = tax.total_tax / MONTHS_PER_YEAR
    monthly_net_pay = gross - deductions.monthly_total - monthly_tax

    return CalculationResult(
        scheme=active_scheme.version,
        gross_monthly=gross,
        annual_gross=annual_gross,
        pensionable_emolument=active_scheme.pensionable_emolument(validated),
        total_monthly_deductions=deductions.monthly_total,
        total_annual_deductions=deductions.annual_total,
        annual_cra=relief.total,
        taxable_income=taxable_income,
        annual_tax=tax.total_tax,
        monthly_tax=monthly_tax,
        monthly_net_pay=monthly_net_pay,
        deduction_breakdown=deductions,
        tax_band_breakdown=tax.per_band,
        cra_breakdown=relief,
        composition=validated,
    )


def calculate_payroll_batch(
    entries: Iterable[Mapping[str, Any]],
    scheme: TaxScheme | str | None = None,
    *,
    executor: Executor | None = None,
) -> list[CalculationResult]:
    """Run :func:`calculate_payroll` for each entry, preserving input order.

    Entries are mappings with ``components``, optional ``gross_monthly`` and
    optional ``deductions``. The first invalid entry aborts the batch with a
    :class:`ValidationError` naming its position.
    """

    active_scheme = resolve_scheme(scheme)
    indexed = list(enumerate(entries))

    def _run(item: tuple[int, Mapping[str, Any]]) -> CalculationResult:
        index, entry = item
        try:
            return calculate_payroll(
                entry.get("components", ()),
                entry.get("deductions"),
                active_scheme,
                gross_monthly=entry.get("gross_monthly"),
            )
        except ValidationError as exc:
            raise ValidationError(
                f"Entry {index}: {exc.message}", total=exc.total, field=exc.field
            ) from exc

    if executor is None:
        return [_run(item) for item in indexed]
    return list(executor.map(_run, indexed))


__all__ = ["calculate_payroll", "calculate_payroll_batch"]
