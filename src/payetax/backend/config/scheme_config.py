"""Configuration loader wrapping the shared scheme schema models."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from .schema import (
    AMOUNT_BASES,
    DEDUCTION_BASES,
    DEDUCTION_KINDS,
    RATE_BASES,
    ConfigurationError,
    DeductionRule,
    PensionContributionConfig,
    ReliefConfig,
    SchemeConfiguration,
    SchemeManifest,
    SchemeManifestEntry,
    TaxBand,
    coerce_decimal,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
MANIFEST_FILE = CONFIG_DIRECTORY / "manifest.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


@lru_cache(maxsize=1)
def load_manifest() -> SchemeManifest:
    """Load and cache the scheme manifest."""

    if not MANIFEST_FILE.exists():
        raise FileNotFoundError("Configuration manifest not found")

    try:
        return SchemeManifest.model_validate(_load_yaml(MANIFEST_FILE))
    except ValidationError as error:
        raise ConfigurationError(f"Manifest validation failed: {error}") from error


def manifest_entries() -> Sequence[SchemeManifestEntry]:
    """Expose the configured manifest entries."""

    return load_manifest().schemes


@lru_cache(maxsize=8)
def load_scheme_configuration(version: str) -> SchemeConfiguration:
    """Load configuration for the named scheme version from disk."""

    try:
        manifest_entry = load_manifest().get_entry(version)
    except KeyError as exc:
        raise FileNotFoundError(
            f"Configuration for scheme '{version}' not declared in manifest"
        ) from exc

    config_file = CONFIG_DIRECTORY / manifest_entry.resolved_filename
    if not config_file.exists():
        raise FileNotFoundError(
            f"Configuration file for scheme '{version}' missing: {config_file.name}"
        )

    raw_config = _load_yaml(config_file)
    raw_config.setdefault("version", version)
    raw_config.setdefault("label", manifest_entry.label)

    try:
        configuration = SchemeConfiguration.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigurationError(
            f"Configuration validation failed for '{version}': {error}"
        ) from error

    if configuration.version != version:
        raise ConfigurationError(
            f"Configuration version mismatch: expected '{version}', found '{configuration.version}'"
        )

    return configuration


def available_schemes() -> Sequence[str]:
    """Return the scheme versions declared in the manifest."""

    return load_manifest().supported_versions


def default_scheme() -> str:
    """Return the scheme version used when callers do not choose one."""

    return load_manifest().default


def clear_caches() -> None:
    """Drop cached manifest and scheme data, e.g. after editing YAML in tests."""

    load_scheme_configuration.cache_clear()
    load_manifest.cache_clear()


__all__ = [
    "AMOUNT_BASES",
    "CONFIG_DIRECTORY",
    "ConfigurationError",
    "DEDUCTION_BASES",
    "DEDUCTION_KINDS",
    "DeductionRule",
    "MANIFEST_FILE",
    "PensionContributionConfig",
    "RATE_BASES",
    "ReliefConfig",
    "SchemeConfiguration",
    "SchemeManifest",
    "SchemeManifestEntry",
    "TaxBand",
    "available_schemes",
    "clear_caches",
    "coerce_decimal",
    "default_scheme",
    "load_manifest",
    "load_scheme_configuration",
    "manifest_entries",
]
