"""Pydantic models describing the versioned tax scheme configuration."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self

DEDUCTION_KINDS: tuple[str, ...] = (
    "statutory_pension",
    "nhf",
    "nhis",
    "life_assurance",
    "voluntary_pension",
    "professional_dues",
    "mortgage_interest",
)

RATE_BASES: frozenset[str] = frozenset({"pensionable_emolument", "gross", "basic_salary"})
AMOUNT_BASES: frozenset[str] = frozenset({"monthly_amount", "annual_amount"})
DEDUCTION_BASES: frozenset[str] = RATE_BASES | AMOUNT_BASES

ONE_HUNDRED = Decimal("100")


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


def coerce_decimal(value: Any) -> Decimal:
    """Convert YAML/JSON scalars to :class:`Decimal` without binary float noise."""

    if isinstance(value, bool):
        raise ConfigurationError("Boolean values are not valid numbers")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ConfigurationError(f"'{value}' is not a valid number") from exc
    else:
        raise ConfigurationError(f"Unsupported numeric value: {value!r}")

    if not result.is_finite():
        raise ConfigurationError(f"'{value}' is not a finite number")
    return result


def _coerce_optional_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    return coerce_decimal(value)


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class TaxBand(ImmutableModel):
    """One slice of a progressive schedule; ``width=None`` marks the open top band."""

    label: str
    width: Decimal | None = None
    rate: Decimal

    @field_validator("width", mode="before")
    @classmethod
    def _coerce_width(cls, value: Any) -> Decimal | None:
        return _coerce_optional_decimal(value)

    @field_validator("rate", mode="before")
    @classmethod
    def _coerce_rate(cls, value: Any) -> Decimal:
        return coerce_decimal(value)

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBand:
        if not (0 <= self.rate <= 1):
            raise ConfigurationError("Tax band rates must be between 0 and 1")
        if self.width is not None and self.width <= 0:
            raise ConfigurationError("Tax band widths must be positive values")
        return self

    @property
    def is_unbounded(self) -> bool:
        return self.width is None


class ReliefConfig(ImmutableModel):
    """Constants for the Consolidated Relief Allowance."""

    fixed_amount: Decimal
    gross_rate: Decimal
    floor_rate: Decimal | None = None

    @field_validator("fixed_amount", "gross_rate", mode="before")
    @classmethod
    def _coerce_amounts(cls, value: Any) -> Decimal:
        return coerce_decimal(value)

    @field_validator("floor_rate", mode="before")
    @classmethod
    def _coerce_floor_rate(cls, value: Any) -> Decimal | None:
        return _coerce_optional_decimal(value)

    @model_validator(mode="after")
    def _validate_values(self) -> ReliefConfig:
        if self.fixed_amount < 0:
            raise ConfigurationError("Relief fixed amount must be non-negative")
        for rate in (self.gross_rate, self.floor_rate):
            if rate is not None and not (0 <= rate <= 1):
                raise ConfigurationError("Relief rates must be between 0 and 1")
        return self


class DeductionRule(ImmutableModel):
    """How a scheme interprets one configurable deduction.

    ``basis`` decides whether the caller's value is a percentage of a salary
    base or an amount. ``fixed_rate`` overrides any caller-supplied percentage
    and ``annual_cap_rate`` caps the annual value at a share of annual gross.
    """

    label: str
    basis: str
    default_rate: Decimal | None = None
    fixed_rate: Decimal | None = None
    annual_cap_rate: Decimal | None = None

    @field_validator("default_rate", "fixed_rate", "annual_cap_rate", mode="before")
    @classmethod
    def _coerce_rates(cls, value: Any) -> Decimal | None:
        return _coerce_optional_decimal(value)

    @model_validator(mode="after")
    def _validate_rule(self) -> DeductionRule:
        if self.basis not in DEDUCTION_BASES:
            allowed = ", ".join(sorted(DEDUCTION_BASES))
            raise ConfigurationError(
                f"Deduction basis '{self.basis}' is not recognised (expected one of: {allowed})"
            )
        for rate in (self.default_rate, self.fixed_rate):
            if rate is not None and not (0 <= rate <= ONE_HUNDRED):
                raise ConfigurationError("Deduction rates must be between 0 and 100")
        if self.basis in AMOUNT_BASES and (
            self.default_rate is not None or self.fixed_rate is not None
        ):
            raise ConfigurationError("Amount-based deductions cannot define rates")
        if self.annual_cap_rate is not None and not (0 <= self.annual_cap_rate <= 1):
            raise ConfigurationError("Deduction cap rates must be between 0 and 1")
        return self

    @property
    def is_rate(self) -> bool:
        return self.basis in RATE_BASES


class PensionContributionConfig(ImmutableModel):
    """Default employee/employer pension contribution percentages."""

    employee_rate: Decimal = Decimal("8")
    employer_rate: Decimal = Decimal("10")

    @field_validator("employee_rate", "employer_rate", mode="before")
    @classmethod
    def _coerce_rates(cls, value: Any) -> Decimal:
        return coerce_decimal(value)

    @model_validator(mode="after")
    def _validate_rates(self) -> PensionContributionConfig:
        for rate in (self.employee_rate, self.employer_rate):
            if not (0 <= rate <= ONE_HUNDRED):
                raise ConfigurationError("Pension contribution rates must be between 0 and 100")
        return self


class SchemeConfiguration(ImmutableModel):
    """Structured representation of one tax scheme's data file."""

    version: str
    label: str
    meta: Mapping[str, Any] = Field(default_factory=dict)
    bands: Sequence[TaxBand]
    relief: ReliefConfig
    pensionable_components: Sequence[str] = ("basic", "housing", "transport")
    deductions: Mapping[str, DeductionRule]
    pension: PensionContributionConfig = Field(default_factory=PensionContributionConfig)

    @field_validator("pensionable_components", mode="before")
    @classmethod
    def _coerce_components(cls, value: Any) -> Sequence[str]:
        if isinstance(value, Iterable) and not isinstance(value, str):
            return tuple(str(entry).strip().lower() for entry in value)
        raise ConfigurationError("'pensionable_components' must be a list of component keys")

    @field_validator("meta", mode="before")
    @classmethod
    def _default_meta(cls, value: Any) -> Mapping[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ConfigurationError("'meta' section must be a mapping if provided")
        return dict(value)

    @model_validator(mode="after")
    def _validate_scheme(self) -> Self:
        self._validate_band_sequence(self.bands)
        unknown = sorted(set(self.deductions) - set(DEDUCTION_KINDS))
        if unknown:
            raise ConfigurationError(f"Unknown deduction kinds configured: {', '.join(unknown)}")
        if not self.pensionable_components:
            raise ConfigurationError("At least one pensionable component must be listed")
        return self

    @staticmethod
    def _validate_band_sequence(bands: Sequence[TaxBand]) -> None:
        if not bands:
            raise ConfigurationError("At least one tax band must be defined")
        unbounded = [band for band in bands if band.is_unbounded]
        if len(unbounded) != 1:
            raise ConfigurationError("Exactly one tax band must have an open width")
        if not bands[-1].is_unbounded:
            raise ConfigurationError("Final tax band must have an open width")


class SchemeManifestEntry(ImmutableModel):
    """Entry describing a supported scheme in the manifest."""

    version: str
    label: str
    filename: str | None = None
    status: str = "active"
    effective_from: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.version}.yaml"


class SchemeManifest(ImmutableModel):
    """Manifest describing the available scheme configuration files."""

    default: str
    schemes: Sequence[SchemeManifestEntry]

    @model_validator(mode="after")
    def _validate_schemes(self) -> SchemeManifest:
        seen: set[str] = set()
        for entry in self.schemes:
            if entry.version in seen:
                raise ConfigurationError(
                    f"Duplicate scheme '{entry.version}' declared in the configuration manifest"
                )
            seen.add(entry.version)
        if self.default not in seen:
            raise ConfigurationError(
                f"Default scheme '{self.default}' is not declared in the manifest"
            )
        return self

    def get_entry(self, version: str) -> SchemeManifestEntry:
        for entry in self.schemes:
            if entry.version == version:
                return entry
        raise KeyError(version)

    @computed_field
    @property
    def supported_versions(self) -> tuple[str, ...]:
        return tuple(entry.version for entry in self.schemes)


__all__ = [
    "AMOUNT_BASES",
    "ConfigurationError",
    "DEDUCTION_BASES",
    "DEDUCTION_KINDS",
    "DeductionRule",
    "ImmutableModel",
    "PensionContributionConfig",
    "RATE_BASES",
    "ReliefConfig",
    "SchemeConfiguration",
    "SchemeManifest",
    "SchemeManifestEntry",
    "TaxBand",
    "ValidationError",
    "coerce_decimal",
]
