"""Scheme lookup and per-scheme policy."""

from __future__ import annotations

from decimal import Decimal

import pytest

from payetax.backend.app.errors import ValidationError
from payetax.backend.app.models import DeductionSetting
from payetax.backend.app.services.schemes import (
    LegacyScheme,
    NTA2025Scheme,
    TaxScheme,
    get_scheme,
    resolve_scheme,
)
from payetax.backend.config.scheme_config import (
    ConfigurationError,
    ReliefConfig,
    load_scheme_configuration,
)


def test_get_scheme_returns_shared_instance() -> None:
    assert get_scheme("legacy") is get_scheme(" Legacy ")
    assert isinstance(get_scheme("legacy"), LegacyScheme)
    assert isinstance(get_scheme("NTA2025"), NTA2025Scheme)


def test_unknown_scheme_lists_supported_versions() -> None:
    with pytest.raises(ValidationError) as excinfo:
        get_scheme("pita1993")

    assert "pita1993" in excinfo.value.message
    assert "legacy" in excinfo.value.message
    assert excinfo.value.field == "scheme"


def test_resolve_scheme_defaults_to_manifest_default() -> None:
    assert resolve_scheme(None).version == "nta2025"


def test_resolve_scheme_passes_instances_through(legacy: TaxScheme) -> None:
    assert resolve_scheme(legacy) is legacy


def test_legacy_pension_rate_is_fixed(legacy: TaxScheme) -> None:
    assert legacy.pension_rate(DeductionSetting(enabled=True, value=Decimal("12"))) == Decimal("8")


def test_nta_pension_rate_defaults_to_eight(nta2025: TaxScheme) -> None:
    assert nta2025.pension_rate(DeductionSetting(enabled=True)) == Decimal("8")
    assert nta2025.pension_rate(DeductionSetting(enabled=True, value=Decimal("12"))) == Decimal("12")


def test_schemes_hold_independent_band_sets(legacy: TaxScheme, nta2025: TaxScheme) -> None:
    assert legacy.bands[0].rate == Decimal("0.07")
    assert nta2025.bands[0].rate == Decimal("0")
    assert legacy.label != nta2025.label


def test_scheme_rejects_configuration_for_another_version() -> None:
    with pytest.raises(ConfigurationError):
        LegacyScheme(load_scheme_configuration("nta2025"))


def test_nta_scheme_requires_floor_rate() -> None:
    config = load_scheme_configuration("nta2025")
    broken = config.model_copy(
        update={"relief": ReliefConfig(fixed_amount=200000, gross_rate="0.2")}
    )

    with pytest.raises(ConfigurationError, match="floor_rate"):
        NTA2025Scheme(broken)


def test_legacy_scheme_requires_fixed_pension_rate() -> None:
    config = load_scheme_configuration("legacy")
    deductions = dict(config.deductions)
    deductions["statutory_pension"] = deductions["statutory_pension"].model_copy(
        update={"fixed_rate": None, "default_rate": Decimal("8")}
    )

    with pytest.raises(ConfigurationError, match="fixed statutory pension"):
        LegacyScheme(config.model_copy(update={"deductions": deductions}))
