"""Orchestrate request validation, payroll calculations and serialisation.

The HTTP routes hand raw JSON mappings to this module. Requests are validated
with the shared Pydantic models, converted to engine inputs, run through
:mod:`payroll_engine`, and the unrounded results are rounded to two decimals
only here, on the way out.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from decimal import Decimal
from time import perf_counter
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from payetax.backend.app.errors import ValidationError
from payetax.backend.app.models import (
    BatchCalculationRequest,
    BatchCalculationResponse,
    CalculationRequest,
    CalculationResponse,
    CalculationResult,
    PensionContributionRequest,
    PensionContributionResponse,
    format_validation_error,
)

from .calculators import (
    calculate_pension_contribution,
    format_percentage,
    round_currency,
    round_rate,
    validate_composition,
)
from .payroll_engine import calculate_payroll, calculate_payroll_batch
from .schemes import resolve_scheme

_LOGGER = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("PAYETAX_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _log_timings(operation: str, timings: dict[str, float] | None, start: float | None) -> None:
    if timings is None or start is None:
        return
    timings["total"] = perf_counter() - start
    _LOGGER.debug(
        "%s timings (ms): %s",
        operation,
        {name: round(duration * 1000, 3) for name, duration in timings.items()},
    )


def _parse_request(payload: Mapping[str, Any] | _ModelT, model: type[_ModelT]) -> _ModelT:
    if isinstance(payload, model):
        source: Any = payload.model_dump(mode="python")
    elif isinstance(payload, Mapping):
        source = payload
    else:
        raise ValidationError("Payload must be a mapping")

    try:
        return model.model_validate(source)
    except PydanticValidationError as exc:
        raise ValidationError(format_validation_error(exc)) from exc


def _money(value: Decimal) -> Decimal:
    return round_currency(value)


def serialise_result(
    result: CalculationResult, *, employee_id: str | None = None
) -> dict[str, Any]:
    """Round a :class:`CalculationResult` into the JSON response shape."""

    scheme = resolve_scheme(result.scheme)

    summary = {
        "gross_monthly": _money(result.gross_monthly),
        "annual_gross": _money(result.annual_gross),
        "pensionable_emolument": _money(result.pensionable_emolument),
        "total_monthly_deductions": _money(result.total_monthly_deductions),
        "total_annual_deductions": _money(result.total_annual_deductions),
        "annual_cra": _money(result.annual_cra),
        "taxable_income": _money(result.taxable_income),
        "annual_tax": _money(result.annual_tax),
        "monthly_tax": _money(result.monthly_tax),
        "monthly_net_pay": _money(result.monthly_net_pay),
        "annual_net_pay": _money(result.annual_net_pay),
        "effective_tax_rate": round_rate(result.effective_tax_rate),
    }

    components = [
        {
            "name": component.name,
            "percentage": round_rate(component.percentage or Decimal("0")),
            "value": _money(component.value or Decimal("0")),
        }
        for component in result.composition.components
    ]

    deductions = [
        {
            "kind": item.kind,
            "label": item.label,
            "monthly": _money(item.monthly),
            "annual": _money(item.annual),
            "rate": item.rate,
            "base": None if item.base is None else _money(item.base),
            "capped": item.capped,
        }
        for item in result.deduction_breakdown.items
    ]

    tax_bands = [
        {
            "label": band.label,
            "rate": band.rate,
            "rate_label": format_percentage(band.rate),
            "taxable_amount": _money(band.taxable_amount),
            "tax": _money(band.tax),
        }
        for band in result.tax_band_breakdown
    ]

    relief = result.cra_breakdown
    response_model = CalculationResponse.model_validate(
        {
            "summary": summary,
            "components": components,
            "deductions": deductions,
            "tax_bands": tax_bands,
            "relief": {
                "fixed_or_floor_component": _money(relief.fixed_or_floor_component),
                "percentage_component": _money(relief.percentage_component),
                "total": _money(relief.total),
            },
            "meta": {
                "scheme": scheme.version,
                "scheme_label": scheme.label,
                "employee_id": employee_id,
            },
        }
    )
    return response_model.model_dump(mode="json", exclude_none=True)


def calculate_paye(payload: Mapping[str, Any] | CalculationRequest) -> dict[str, Any]:
    """Compute the PAYE summary for a single employee payload."""

    request_model = _parse_request(payload, CalculationRequest)

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    with _profile_section("engine", timings):
        result = calculate_payroll(
            request_model.engine_components(),
            request_model.engine_deductions(),
            request_model.scheme,
            gross_monthly=request_model.gross_monthly,
        )

    with _profile_section("serialise", timings):
        response = serialise_result(result, employee_id=request_model.employee_id)

    _log_timings("calculate_paye", timings, overall_start)
    return response


_BATCH_TOTAL_FIELDS = (
    "gross_monthly",
    "total_monthly_deductions",
    "monthly_tax",
    "monthly_net_pay",
    "annual_tax",
)


def calculate_batch(payload: Mapping[str, Any] | BatchCalculationRequest) -> dict[str, Any]:
    """Compute PAYE for every employee in a payroll run."""

    request_model = _parse_request(payload, BatchCalculationRequest)
    scheme = resolve_scheme(request_model.scheme)

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    entries = [
        {
            "components": employee.engine_components(),
            "deductions": employee.engine_deductions(),
            "gross_monthly": employee.gross_monthly,
        }
        for employee in request_model.employees
    ]

    with _profile_section("engine", timings):
        results = calculate_payroll_batch(entries, scheme)

    totals = {name: Decimal("0") for name in _BATCH_TOTAL_FIELDS}
    for result in results:
        for name in _BATCH_TOTAL_FIELDS:
            totals[name] += getattr(result, name)

    with _profile_section("serialise", timings):
        serialised = [
            serialise_result(result, employee_id=employee.employee_id)
            for result, employee in zip(results, request_model.employees)
        ]

    _log_timings("calculate_batch", timings, overall_start)

    response_model = BatchCalculationResponse.model_validate(
        {
            "scheme": scheme.version,
            "results": serialised,
            "totals": {name: _money(value) for name, value in totals.items()},
        }
    )
    return response_model.model_dump(mode="json", exclude_none=True)


def calculate_pension(
    payload: Mapping[str, Any] | PensionContributionRequest,
) -> dict[str, Any]:
    """Split the pension contribution between employee and employer."""

    request_model = _parse_request(payload, PensionContributionRequest)
    scheme = resolve_scheme(request_model.scheme)
    composition = validate_composition(
        [component.model_dump() for component in request_model.components],
        request_model.gross_monthly,
    )
    contribution = calculate_pension_contribution(
        composition,
        scheme,
        employee_rate=request_model.employee_rate,
        employer_rate=request_model.employer_rate,
    )

    response_model = PensionContributionResponse.model_validate(
        {
            "scheme": scheme.version,
            "pensionable_emolument": _money(contribution.pensionable_emolument),
            "employee_rate": contribution.employee_rate,
            "employer_rate": contribution.employer_rate,
            "employee_monthly": _money(contribution.employee_monthly),
            "employer_monthly": _money(contribution.employer_monthly),
            "total_monthly": _money(contribution.total_monthly),
            "employee_annual": _money(contribution.employee_annual),
            "employer_annual": _money(contribution.employer_annual),
            "total_annual": _money(contribution.total_annual),
        }
    )
    return response_model.model_dump(mode="json")


__all__ = ["calculate_batch", "calculate_paye", "calculate_pension", "serialise_result"]
