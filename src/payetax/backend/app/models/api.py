"""Pydantic models describing the public API surface."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from payetax.backend.config.scheme_config import DEDUCTION_KINDS, coerce_decimal

__all__ = [
    "BatchCalculationRequest",
    "BatchCalculationResponse",
    "CalculationRequest",
    "CalculationResponse",
    "ComponentEntry",
    "DeductionEntry",
    "DeductionSettingInput",
    "EmployeeInput",
    "PensionContributionRequest",
    "PensionContributionResponse",
    "ReliefEntry",
    "ResponseMeta",
    "SalaryComponentInput",
    "Summary",
    "TaxBandEntry",
    "format_validation_error",
]


def _optional_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    return coerce_decimal(value)


class SalaryComponentInput(BaseModel):
    """One salary component as submitted by the form layer."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    percentage: Decimal | None = Field(default=None, ge=0)
    value: Decimal | None = Field(default=None, ge=0)

    @field_validator("percentage", "value", mode="before")
    @classmethod
    def _coerce_numbers(cls, value: Any) -> Decimal | None:
        return _optional_decimal(value)


class DeductionSettingInput(BaseModel):
    """Enable flag plus the percentage or amount for one deduction kind."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    value: Decimal | None = Field(default=None, ge=0)

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> Decimal | None:
        return _optional_decimal(value)


def _check_deduction_kinds(value: dict[str, Any] | None) -> dict[str, Any]:
    if value is None:
        return {}
    unknown = sorted(set(value) - set(DEDUCTION_KINDS))
    if unknown:
        raise ValueError(f"unknown deduction kinds: {', '.join(unknown)}")
    return value


class EmployeeInput(BaseModel):
    """Salary composition and deduction choices for one employee."""

    model_config = ConfigDict(extra="forbid")

    employee_id: str | None = None
    gross_monthly: Decimal | None = None
    components: list[SalaryComponentInput] = Field(default_factory=list)
    deductions: dict[str, DeductionSettingInput] = Field(default_factory=dict)

    @field_validator("gross_monthly", mode="before")
    @classmethod
    def _coerce_gross(cls, value: Any) -> Decimal | None:
        return _optional_decimal(value)

    @field_validator("deductions", mode="before")
    @classmethod
    def _validate_kinds(cls, value: Any) -> Any:
        if value is None or isinstance(value, dict):
            return _check_deduction_kinds(value)
        return value

    def engine_components(self) -> list[dict[str, Any]]:
        return [component.model_dump() for component in self.components]

    def engine_deductions(self) -> dict[str, dict[str, Any]]:
        return {kind: setting.model_dump() for kind, setting in self.deductions.items()}


class CalculationRequest(EmployeeInput):
    """Single payroll calculation request."""

    scheme: str | None = None


class BatchCalculationRequest(BaseModel):
    """Payroll run over several employees under one scheme."""

    model_config = ConfigDict(extra="forbid")

    scheme: str | None = None
    employees: list[EmployeeInput] = Field(..., min_length=1)


class PensionContributionRequest(BaseModel):
    """Employee/employer pension split request."""

    model_config = ConfigDict(extra="forbid")

    scheme: str | None = None
    gross_monthly: Decimal | None = None
    components: list[SalaryComponentInput] = Field(default_factory=list)
    employee_rate: Decimal | None = Field(default=None, ge=0, le=100)
    employer_rate: Decimal | None = Field(default=None, ge=0, le=100)

    @field_validator("gross_monthly", "employee_rate", "employer_rate", mode="before")
    @classmethod
    def _coerce_numbers(cls, value: Any) -> Decimal | None:
        return _optional_decimal(value)


class Summary(BaseModel):
    """Headline figures rounded for display."""

    model_config = ConfigDict(extra="forbid")

    gross_monthly: float
    annual_gross: float
    pensionable_emolument: float
    total_monthly_deductions: float
    total_annual_deductions: float
    annual_cra: float
    taxable_income: float
    annual_tax: float
    monthly_tax: float
    monthly_net_pay: float
    annual_net_pay: float
    effective_tax_rate: float


class ComponentEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    percentage: float
    value: float


class DeductionEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: str
    label: str
    monthly: float
    annual: float
    rate: float | None = None
    base: float | None = None
    capped: bool = False


class TaxBandEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    label: str
    rate: float
    rate_label: str
    taxable_amount: float
    tax: float


class ReliefEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fixed_or_floor_component: float
    percentage_component: float
    total: float


class ResponseMeta(BaseModel):
    model_config = ConfigDict(extra="forbid")

    scheme: str
    scheme_label: str
    employee_id: str | None = None


class CalculationResponse(BaseModel):
    """Full response payload produced by the calculation service."""

    model_config = ConfigDict(extra="forbid")

    summary: Summary
    components: list[ComponentEntry]
    deductions: list[DeductionEntry]
    tax_bands: list[TaxBandEntry]
    relief: ReliefEntry
    meta: ResponseMeta


class BatchCalculationResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    scheme: str
    results: list[CalculationResponse]
    totals: dict[str, float]


class PensionContributionResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    scheme: str
    pensionable_emolument: float
    employee_rate: float
    employer_rate: float
    employee_monthly: float
    employer_monthly: float
    total_monthly: float
    employee_annual: float
    employer_annual: float
    total_annual: float


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
