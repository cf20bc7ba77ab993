"""Domain errors surfaced by the payroll tax engine."""

from __future__ import annotations

from decimal import Decimal


class ValidationError(ValueError):
    """Raised when calculation inputs are rejected before any computation runs.

    ``total`` carries the computed component percentage total when the failure
    is a composition mismatch so callers can echo it back to the user.
    ``field`` names the offending input where one can be identified.
    """

    def __init__(
        self,
        message: str,
        *,
        total: Decimal | None = None,
        field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.total = total
        self.field = field


__all__ = ["ValidationError"]
