"""Value objects exchanged with the payroll tax engine.

Inputs validate themselves on construction so that the calculators can trust
them. Results are frozen and carry unrounded :class:`Decimal` values; rounding
happens only when the service layer serialises a result for display.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Any

from payetax.backend.app.errors import ValidationError
from payetax.backend.config.scheme_config import DEDUCTION_KINDS, coerce_decimal

ZERO = Decimal("0")


def component_key(name: str) -> str:
    """Return the lookup key for a component name (``"Basic Salary"`` -> ``"basic"``)."""

    words = name.strip().lower().split()
    if not words:
        return ""
    return "".join(char for char in words[0] if char.isalnum())


def to_money(value: Any, field_name: str) -> Decimal:
    """Coerce ``value`` to :class:`Decimal`, raising :class:`ValidationError` on bad input."""

    try:
        return coerce_decimal(value)
    except ValueError as exc:
        raise ValidationError(f"'{field_name}' must be a number", field=field_name) from exc


@dataclass(frozen=True, slots=True)
class SalaryComponent:
    """A named slice of monthly pay, driven either by percentage or by value."""

    name: str
    percentage: Decimal | None = None
    value: Decimal | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Salary components require a name", field="name")
        if self.percentage is None and self.value is None:
            raise ValidationError(
                f"Component '{self.name}' requires a percentage or a value",
                field=self.name,
            )
        if self.percentage is not None:
            percentage = to_money(self.percentage, f"{self.name}.percentage")
            if percentage < 0:
                raise ValidationError(
                    f"Component '{self.name}' percentage cannot be negative",
                    field=self.name,
                )
            object.__setattr__(self, "percentage", percentage)
        if self.value is not None:
            value = to_money(self.value, f"{self.name}.value")
            if value < 0:
                raise ValidationError(
                    f"Component '{self.name}' value cannot be negative", field=self.name
                )
            object.__setattr__(self, "value", value)

    @property
    def key(self) -> str:
        return component_key(self.name)

    @property
    def is_percentage_driven(self) -> bool:
        return self.percentage is not None


@dataclass(frozen=True, slots=True)
class SalaryComposition:
    """Validated components whose ``value`` and ``percentage`` are both populated."""

    gross_monthly: Decimal
    components: tuple[SalaryComponent, ...]
    total_percentage: Decimal

    def value_for(self, key: str) -> Decimal:
        return sum(
            (component.value or ZERO for component in self.components if component.key == key),
            ZERO,
        )

    def has_component(self, key: str) -> bool:
        return any(component.key == key for component in self.components)


@dataclass(frozen=True, slots=True)
class DeductionSetting:
    """Enable flag plus a percentage or amount whose meaning the scheme decides."""

    enabled: bool = False
    value: Decimal | None = None

    def __post_init__(self) -> None:
        if self.value is None:
            return
        value = to_money(self.value, "deduction value")
        if value < 0:
            raise ValidationError("Deduction values cannot be negative", field="deductions")
        object.__setattr__(self, "value", value)


_DISABLED = DeductionSetting()


@dataclass(frozen=True, slots=True)
class DeductionConfig:
    """Per-kind deduction settings; kinds not listed are disabled."""

    settings: Mapping[str, DeductionSetting] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = sorted(set(self.settings) - set(DEDUCTION_KINDS))
        if unknown:
            raise ValidationError(
                f"Unknown deduction kinds: {', '.join(unknown)}", field="deductions"
            )
        object.__setattr__(self, "settings", MappingProxyType(dict(self.settings)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> DeductionConfig:
        """Build a config from ``{kind: {"enabled": bool, "value": number}}`` data."""

        settings: dict[str, DeductionSetting] = {}
        for kind, raw in (data or {}).items():
            if isinstance(raw, DeductionSetting):
                settings[str(kind)] = raw
            elif isinstance(raw, Mapping):
                settings[str(kind)] = DeductionSetting(
                    enabled=bool(raw.get("enabled", False)),
                    value=raw.get("value"),
                )
            elif isinstance(raw, bool):
                settings[str(kind)] = DeductionSetting(enabled=raw)
            else:
                raise ValidationError(
                    f"Deduction '{kind}' must be a mapping with 'enabled' and 'value'",
                    field=str(kind),
                )
        return cls(settings=settings)

    def get(self, kind: str) -> DeductionSetting:
        return self.settings.get(kind, _DISABLED)


@dataclass(frozen=True, slots=True)
class DeductionItem:
    kind: str
    label: str
    monthly: Decimal
    annual: Decimal
    rate: Decimal | None = None
    base: Decimal | None = None
    capped: bool = False


@dataclass(frozen=True, slots=True)
class DeductionBreakdown:
    """Enabled deductions with their monthly and annual values."""

    items: tuple[DeductionItem, ...]
    monthly_total: Decimal
    annual_total: Decimal

    @property
    def per_item(self) -> Mapping[str, DeductionItem]:
        return MappingProxyType({item.kind: item for item in self.items})


@dataclass(frozen=True, slots=True)
class ReliefBreakdown:
    fixed_or_floor_component: Decimal
    percentage_component: Decimal
    total: Decimal


@dataclass(frozen=True, slots=True)
class BandAllocation:
    label: str
    rate: Decimal
    taxable_amount: Decimal
    tax: Decimal


@dataclass(frozen=True, slots=True)
class ProgressiveTaxResult:
    total_tax: Decimal
    per_band: tuple[BandAllocation, ...]


@dataclass(frozen=True, slots=True)
class PensionContribution:
    """Employee and employer pension contributions on the pensionable emolument."""

    pensionable_emolument: Decimal
    employee_rate: Decimal
    employer_rate: Decimal
    employee_monthly: Decimal
    employer_monthly: Decimal

    @property
    def total_monthly(self) -> Decimal:
        return self.employee_monthly + self.employer_monthly

    @property
    def employee_annual(self) -> Decimal:
        return self.employee_monthly * 12

    @property
    def employer_annual(self) -> Decimal:
        return self.employer_monthly * 12

    @property
    def total_annual(self) -> Decimal:
        return self.total_monthly * 12


@dataclass(frozen=True, slots=True)
class CalculationResult:
    """Complete, unrounded output of one payroll calculation."""

    scheme: str
    gross_monthly: Decimal
    annual_gross: Decimal
    pensionable_emolument: Decimal
    total_monthly_deductions: Decimal
    total_annual_deductions: Decimal
    annual_cra: Decimal
    taxable_income: Decimal
    annual_tax: Decimal
    monthly_tax: Decimal
    monthly_net_pay: Decimal
    deduction_breakdown: DeductionBreakdown
    tax_band_breakdown: tuple[BandAllocation, ...]
    cra_breakdown: ReliefBreakdown
    composition: SalaryComposition

    @property
    def annual_net_pay(self) -> Decimal:
        return self.monthly_net_pay * 12

    @property
    def effective_tax_rate(self) -> Decimal:
        if self.annual_gross <= 0:
            return ZERO
        return self.annual_tax / self.annual_gross


__all__ = [
    "BandAllocation",
    "CalculationResult",
    "DeductionBreakdown",
    "DeductionConfig",
    "DeductionItem",
    "DeductionSetting",
    "PensionContribution",
    "ProgressiveTaxResult",
    "ReliefBreakdown",
    "SalaryComponent",
    "SalaryComposition",
    "ZERO",
    "component_key",
    "to_money",
]
