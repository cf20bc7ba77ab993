"""REST endpoints for PAYE and pension calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from payetax.backend.services import (
    build_calculation_response,
    calculate_batch,
    calculate_paye,
    calculate_pension,
    parse_calculation_payload,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


@blueprint.post("/calculations")
def create_calculation() -> tuple[Any, int]:
    """Compute PAYE for a single employee using the submitted JSON payload."""

    payload = parse_calculation_payload(request)
    result = calculate_paye(payload)

    return build_calculation_response(result)


@blueprint.post("/calculations/batch")
def create_batch_calculation() -> tuple[Any, int]:
    """Compute PAYE for every employee of a payroll run."""

    payload = parse_calculation_payload(request)
    result = calculate_batch(payload)

    return build_calculation_response(result)


@blueprint.post("/pension-contributions")
def create_pension_contribution() -> tuple[Any, int]:
    payload = parse_calculation_payload(request)
    result = calculate_pension(payload)

    return build_calculation_response(result)
