from decimal import Decimal

from payetax.backend.config.scheme_config import TaxBand, load_scheme_configuration
from payetax.backend.config.validator import (
    main,
    validate_all_schemes,
    validate_scheme_configuration,
)


def test_current_configurations_are_valid() -> None:
    results = validate_all_schemes()
    assert set(results) == {"legacy", "nta2025"}
    assert all(not issues for issues in results.values()), results


def test_validator_flags_open_band_out_of_place() -> None:
    config = load_scheme_configuration("legacy")
    bands = [TaxBand(label="Open", rate=Decimal("0.1")), *config.bands]
    broken = config.model_copy(update={"bands": bands})

    errors = validate_scheme_configuration(broken)

    assert any("open-ended but not last" in error for error in errors)


def test_validator_flags_decreasing_rates() -> None:
    config = load_scheme_configuration("nta2025")
    bands = list(config.bands)
    bands[1] = bands[1].model_copy(update={"rate": Decimal("0.30")})
    broken = config.model_copy(update={"bands": bands})

    errors = validate_scheme_configuration(broken)

    assert any("should not decrease" in error for error in errors)


def test_validator_requires_statutory_pension() -> None:
    config = load_scheme_configuration("nta2025")
    deductions = {
        kind: rule for kind, rule in config.deductions.items() if kind != "statutory_pension"
    }
    broken = config.model_copy(update={"deductions": deductions})

    errors = validate_scheme_configuration(broken)

    assert "deductions: statutory_pension rule is required" in errors


def test_validator_flags_rate_rule_without_rate() -> None:
    config = load_scheme_configuration("legacy")
    deductions = dict(config.deductions)
    deductions["nhf"] = deductions["nhf"].model_copy(update={"default_rate": None})
    broken = config.model_copy(update={"deductions": deductions})

    errors = validate_scheme_configuration(broken)

    assert any(error.startswith("deductions.nhf") for error in errors)


def test_validator_flags_out_of_range_relief() -> None:
    config = load_scheme_configuration("nta2025")
    relief = config.relief.model_copy(update={"floor_rate": Decimal("1.5")})
    broken = config.model_copy(update={"relief": relief})

    errors = validate_scheme_configuration(broken)

    assert any("floor rate" in error for error in errors)


def test_validator_flags_duplicate_pensionable_components() -> None:
    config = load_scheme_configuration("legacy")
    broken = config.model_copy(
        update={"pensionable_components": ("basic", "housing", "basic")}
    )

    errors = validate_scheme_configuration(broken)

    assert any("duplicate component keys" in error for error in errors)


def test_cli_reports_ok(capsys) -> None:
    exit_code = main(["legacy", "nta2025"])

    captured = capsys.readouterr().out
    assert exit_code == 0
    assert "[legacy] OK" in captured
    assert "[nta2025] OK" in captured


def test_cli_reports_unknown_scheme(capsys) -> None:
    exit_code = main(["pita1993"])

    assert exit_code == 1
    assert "failed to load configuration" in capsys.readouterr().out
