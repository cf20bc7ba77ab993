"""Expose scheme configuration consumed by payroll front-ends.

Forms use these endpoints to list the available schemes, show each band
schedule and relief formula, and decide which deduction inputs to render
(a percentage field for rate-based kinds, an amount field otherwise).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from flask import Blueprint, jsonify

from payetax.backend.app.http import ProblemResponse, problem_response
from payetax.backend.app.services.calculators import format_percentage
from payetax.backend.config.scheme_config import (
    DEDUCTION_KINDS,
    SchemeConfiguration,
    available_schemes,
    load_manifest,
    load_scheme_configuration,
)
from payetax.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def _number(value: Decimal | None) -> float | None:
    return None if value is None else float(value)


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    manifest = load_manifest()
    return {
        "version": get_project_version(),
        "supported_schemes": list(manifest.supported_versions),
        "default_scheme": manifest.default,
    }


def _load_scheme(version: str) -> SchemeConfiguration | ProblemResponse:
    normalised = version.strip().lower()
    if normalised not in available_schemes():
        return problem_response(
            "not_found", status=404, message=f"Unknown tax scheme '{version}'"
        )
    try:
        return load_scheme_configuration(normalised)
    except FileNotFoundError as exc:  # pragma: no cover - manifest/file drift
        return problem_response("not_found", status=404, message=str(exc))


def _serialise_scheme(config: SchemeConfiguration) -> dict[str, Any]:
    entry = load_manifest().get_entry(config.version)

    bands = [
        {
            "label": band.label,
            "width": _number(band.width),
            "rate": float(band.rate),
            "rate_label": format_percentage(band.rate),
        }
        for band in config.bands
    ]

    deductions = []
    for kind in DEDUCTION_KINDS:
        rule = config.deductions.get(kind)
        if rule is None:
            continue
        deductions.append(
            {
                "kind": kind,
                "label": rule.label,
                "basis": rule.basis,
                "input": "percentage" if rule.is_rate else "amount",
                "default_rate": _number(rule.default_rate),
                "fixed_rate": _number(rule.fixed_rate),
                "annual_cap_rate": _number(rule.annual_cap_rate),
            }
        )

    return {
        "version": config.version,
        "label": config.label,
        "status": entry.status,
        "effective_from": entry.effective_from,
        "meta": dict(config.meta),
        "bands": bands,
        "relief": {
            "fixed_amount": float(config.relief.fixed_amount),
            "gross_rate": float(config.relief.gross_rate),
            "floor_rate": _number(config.relief.floor_rate),
        },
        "pensionable_components": list(config.pensionable_components),
        "deductions": deductions,
        "pension": {
            "employee_rate": float(config.pension.employee_rate),
            "employer_rate": float(config.pension.employer_rate),
        },
    }


@blueprint.get("/meta")
def get_application_metadata() -> tuple[Any, int]:
    """Expose lightweight application metadata such as the version identifier."""

    payload = get_configuration_metadata()
    return jsonify(payload), 200


@blueprint.get("/schemes")
def list_schemes() -> tuple[Any, int]:
    """Return every configured scheme with its bands, relief and deductions."""

    schemes = [
        _serialise_scheme(load_scheme_configuration(version))
        for version in available_schemes()
    ]
    metadata = get_configuration_metadata()
    payload = {
        "schemes": schemes,
        "default_scheme": metadata["default_scheme"],
        "supported_schemes": metadata["supported_schemes"],
    }
    return jsonify(payload), 200


@blueprint.get("/schemes/<version>")
def get_scheme_detail(version: str) -> tuple[Any, int]:
    config = _load_scheme(version)
    if isinstance(config, ProblemResponse):
        return config.to_response()

    return jsonify(_serialise_scheme(config)), 200
