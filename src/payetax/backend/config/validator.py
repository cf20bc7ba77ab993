"""Utilities for validating scheme configuration data and surfacing issues."""

from __future__ import annotations

import argparse
from collections import Counter
from typing import Mapping, Sequence

from .scheme_config import (
    ConfigurationError,
    DeductionRule,
    ReliefConfig,
    SchemeConfiguration,
    TaxBand,
    available_schemes,
    load_scheme_configuration,
)


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_bands(bands: Sequence[TaxBand]) -> list[str]:
    errors: list[str] = []

    if not bands:
        errors.append(_format_scope("bands", "no tax bands defined"))
        return errors

    for position, band in enumerate(bands):
        if band.is_unbounded and position != len(bands) - 1:
            errors.append(
                _format_scope("bands", f"band '{band.label}' is open-ended but not last")
            )
        if not band.label.strip():
            errors.append(_format_scope("bands", f"band {position} has an empty label"))
        if band.rate < 0 or band.rate > 1:
            errors.append(
                _format_scope("bands", f"band '{band.label}' rate {band.rate} must be between 0 and 1")
            )

    if not bands[-1].is_unbounded:
        errors.append(_format_scope("bands", "final band must be open-ended"))

    rates = [band.rate for band in bands]
    if rates != sorted(rates):
        errors.append(_format_scope("bands", "band rates should not decrease"))

    return errors


def _validate_relief(scope: str, relief: ReliefConfig) -> list[str]:
    errors: list[str] = []

    if relief.fixed_amount < 0:
        errors.append(_format_scope(scope, "fixed amount must be non-negative"))

    for label, value in {"gross": relief.gross_rate, "floor": relief.floor_rate}.items():
        if value is not None and (value < 0 or value > 1):
            errors.append(
                _format_scope(scope, f"{label} rate {value} must be between 0 and 1")
            )

    return errors


def _validate_deductions(rules: Mapping[str, DeductionRule]) -> list[str]:
    errors: list[str] = []

    if "statutory_pension" not in rules:
        errors.append(_format_scope("deductions", "statutory_pension rule is required"))

    labels = Counter(rule.label for rule in rules.values())
    duplicates = sorted(label for label, count in labels.items() if count > 1)
    if duplicates:
        errors.append(
            _format_scope("deductions", f"duplicate deduction labels detected: {duplicates}")
        )

    for kind, rule in rules.items():
        scope = f"deductions.{kind}"
        if rule.is_rate and rule.default_rate is None and rule.fixed_rate is None:
            errors.append(
                _format_scope(scope, "rate-based deductions must define a default or fixed rate")
            )
        if rule.fixed_rate is not None and rule.default_rate is not None:
            errors.append(
                _format_scope(scope, "fixed_rate and default_rate are mutually exclusive")
            )

    return errors


def _validate_pensionable_components(components: Sequence[str]) -> list[str]:
    errors: list[str] = []
    duplicates = sorted(key for key, count in Counter(components).items() if count > 1)
    if duplicates:
        errors.append(
            _format_scope(
                "pensionable_components",
                f"duplicate component keys detected: {duplicates}",
            )
        )
    return errors


def validate_scheme_configuration(config: SchemeConfiguration) -> list[str]:
    """Return a list of validation issues for the provided configuration."""

    errors: list[str] = []

    errors.extend(_validate_bands(config.bands))
    errors.extend(_validate_relief("relief", config.relief))
    errors.extend(_validate_deductions(config.deductions))
    errors.extend(_validate_pensionable_components(config.pensionable_components))

    return errors


def validate_all_schemes(versions: Sequence[str] | None = None) -> dict[str, list[str]]:
    """Validate all configured schemes and return issues keyed by version."""

    targets = versions or available_schemes()
    results: dict[str, list[str]] = {}

    for version in targets:
        config = load_scheme_configuration(version)
        results[version] = validate_scheme_configuration(config)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate configured tax schemes and report issues helpful to contributors."
    )
    parser.add_argument(
        "schemes",
        nargs="*",
        help="Specific scheme versions to validate (defaults to all configured schemes)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    versions = args.schemes or available_schemes()

    if not versions:
        parser.print_help()
        return 1

    exit_code = 0

    for version in versions:
        try:
            config = load_scheme_configuration(version)
        except (FileNotFoundError, ConfigurationError) as error:
            print(f"[{version}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_scheme_configuration(config)
        if issues:
            exit_code = 1
            print(f"[{version}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{version}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
