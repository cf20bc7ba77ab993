"""Versioned tax schemes.

Each scheme wraps the YAML data for one regime and supplies the policy
pieces that differ between regimes: the relief formula and how the
statutory pension rate is chosen. The engine talks to :class:`TaxScheme`
only and never branches on the version string.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from decimal import Decimal
from functools import lru_cache
from typing import ClassVar

from payetax.backend.app.errors import ValidationError
from payetax.backend.app.models.domain import (
    ZERO,
    DeductionSetting,
    ReliefBreakdown,
    SalaryComposition,
)
from payetax.backend.config.scheme_config import (
    ConfigurationError,
    DeductionRule,
    PensionContributionConfig,
    SchemeConfiguration,
    TaxBand,
    available_schemes,
    default_scheme,
    load_scheme_configuration,
)

from .calculators.deductions import pensionable_emolument
from .calculators.relief import flat_floor_relief, scaled_floor_relief


class TaxScheme(ABC):
    """Read-only policy object for one tax regime."""

    version: ClassVar[str]

    def __init__(self, config: SchemeConfiguration) -> None:
        if config.version != self.version:
            raise ConfigurationError(
                f"{type(self).__name__} cannot load configuration for '{config.version}'"
            )
        self._config = config

    def __repr__(self) -> str:
        return f"{type(self).__name__}(version={self.version!r})"

    @property
    def config(self) -> SchemeConfiguration:
        return self._config

    @property
    def label(self) -> str:
        return self._config.label

    @property
    def bands(self) -> Sequence[TaxBand]:
        return self._config.bands

    @property
    def deduction_rules(self) -> Mapping[str, DeductionRule]:
        return self._config.deductions

    @property
    def pension_defaults(self) -> PensionContributionConfig:
        return self._config.pension

    def pensionable_emolument(self, composition: SalaryComposition) -> Decimal:
        return pensionable_emolument(composition, tuple(self._config.pensionable_components))

    def deduction_rate(self, kind: str, setting: DeductionSetting) -> Decimal:
        """Percentage applied for a rate-based deduction ``kind``."""

        if kind == "statutory_pension":
            return self.pension_rate(setting)
        rule = self.deduction_rules[kind]
        if rule.fixed_rate is not None:
            return rule.fixed_rate
        if setting.value is not None:
            return setting.value
        return rule.default_rate or ZERO

    @abstractmethod
    def relief(self, annual_gross: Decimal) -> ReliefBreakdown:
        """Consolidated Relief Allowance for ``annual_gross``."""

    @abstractmethod
    def pension_rate(self, setting: DeductionSetting) -> Decimal:
        """Statutory pension percentage of the pensionable emolument."""


class LegacyScheme(TaxScheme):
    """Pre-2026 PAYE: flat CRA floor and a statutory pension fixed by law."""

    version = "legacy"

    def __init__(self, config: SchemeConfiguration) -> None:
        super().__init__(config)
        pension_rule = config.deductions.get("statutory_pension")
        if pension_rule is None or pension_rule.fixed_rate is None:
            raise ConfigurationError("Legacy scheme requires a fixed statutory pension rate")

    def relief(self, annual_gross: Decimal) -> ReliefBreakdown:
        return flat_floor_relief(annual_gross, self._config.relief)

    def pension_rate(self, setting: DeductionSetting) -> Decimal:
        return self.deduction_rules["statutory_pension"].fixed_rate


class NTA2025Scheme(TaxScheme):
    """Nigeria Tax Act 2025: scaled CRA floor and a caller-chosen pension rate."""

    version = "nta2025"

    def __init__(self, config: SchemeConfiguration) -> None:
        super().__init__(config)
        if config.relief.floor_rate is None:
            raise ConfigurationError("NTA 2025 scheme requires a relief 'floor_rate'")

    def relief(self, annual_gross: Decimal) -> ReliefBreakdown:
        return scaled_floor_relief(annual_gross, self._config.relief)

    def pension_rate(self, setting: DeductionSetting) -> Decimal:
        if setting.value is not None:
            return setting.value
        return self.deduction_rules["statutory_pension"].default_rate or ZERO


SCHEME_TYPES: Mapping[str, type[TaxScheme]] = {
    LegacyScheme.version: LegacyScheme,
    NTA2025Scheme.version: NTA2025Scheme,
}


@lru_cache(maxsize=8)
def _build_scheme(version: str) -> TaxScheme:
    return SCHEME_TYPES[version](load_scheme_configuration(version))


def get_scheme(version: str) -> TaxScheme:
    """Return the shared, immutable scheme instance for ``version``."""

    normalised = version.strip().lower()
    if normalised not in SCHEME_TYPES or normalised not in available_schemes():
        supported = ", ".join(available_schemes())
        raise ValidationError(
            f"Unknown tax scheme '{version}' (supported: {supported})", field="scheme"
        )
    return _build_scheme(normalised)


def clear_scheme_cache() -> None:
    """Forget built schemes so edited configuration is picked up."""

    _build_scheme.cache_clear()


def resolve_scheme(scheme: TaxScheme | str | None) -> TaxScheme:
    """Accept a scheme instance, a version string, or ``None`` for the default."""

    if isinstance(scheme, TaxScheme):
        return scheme
    if scheme is None:
        return get_scheme(default_scheme())
    return get_scheme(str(scheme))


__all__ = [
    "LegacyScheme",
    "NTA2025Scheme",
    "SCHEME_TYPES",
    "TaxScheme",
    "clear_scheme_cache",
    "get_scheme",
    "resolve_scheme",
]
