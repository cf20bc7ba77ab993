"""Service-layer helpers for the PAYE tax backend."""

from payetax.backend.app.services.calculation_service import (
    calculate_batch,
    calculate_paye,
    calculate_pension,
)

from .request_parser import parse_calculation_payload
from .response_builder import build_calculation_response

__all__ = [
    "build_calculation_response",
    "calculate_batch",
    "calculate_paye",
    "calculate_pension",
    "parse_calculation_payload",
]
