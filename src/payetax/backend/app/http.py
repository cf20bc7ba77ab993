"""HTTP helper utilities shared across Flask blueprints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from flask import jsonify

from .errors import ValidationError


@dataclass(frozen=True)
class ProblemResponse:
    """JSON error payload of the form ``{"error", "message", ...extra}``."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.message:
            payload["message"] = self.message
        if self.extra:
            payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        """Convert the problem payload into a Flask response tuple."""

        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Build a :class:`ProblemResponse`, dropping ``None`` extras."""

    additional = {key: value for key, value in extra.items() if value is not None}
    return ProblemResponse(
        error=error, status=status, message=message, extra=additional or None
    )


def validation_problem(error: ValueError) -> ProblemResponse:
    """Translate an engine or configuration error into a 400 payload.

    Composition failures echo the computed percentage ``total`` so the form
    can show how far off the split is.
    """

    if isinstance(error, ValidationError):
        total = float(error.total) if error.total is not None else None
        return problem_response(
            "validation_error",
            status=400,
            message=error.message,
            total=total,
            field=error.field,
        )
    return problem_response("validation_error", status=400, message=str(error))


__all__ = ["ProblemResponse", "problem_response", "validation_problem"]
