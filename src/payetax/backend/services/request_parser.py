"""Helpers for normalising incoming calculation requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest


def _resolve_scheme(req: Request, payload: dict[str, Any]) -> None:
    """Fall back to a ``?scheme=`` query parameter when the body omits one."""

    scheme = payload.get("scheme")
    if isinstance(scheme, str) and scheme.strip():
        payload["scheme"] = scheme.strip().lower()
        return

    scheme_param = req.args.get("scheme")
    if scheme_param and scheme_param.strip():
        payload["scheme"] = scheme_param.strip().lower()


def parse_calculation_payload(req: Request) -> dict[str, Any]:
    """Extract and validate a JSON payload from ``req``."""

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    payload = dict(data)
    _resolve_scheme(req, payload)

    return payload
