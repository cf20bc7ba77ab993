"""Test configuration utilities and shared fixtures."""

import sys
from pathlib import Path

# Make ``src`` importable when tests run without an editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from payetax.backend.app import create_app  # noqa: E402
from payetax.backend.app.services.schemes import (  # noqa: E402
    TaxScheme,
    get_scheme,
)

BHT_COMPONENTS = [
    {"name": "Basic Salary", "percentage": 60},
    {"name": "Housing Allowance", "percentage": 25},
    {"name": "Transport Allowance", "percentage": 15},
]


@pytest.fixture()
def app() -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app()
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()


@pytest.fixture()
def legacy() -> TaxScheme:
    return get_scheme("legacy")


@pytest.fixture()
def nta2025() -> TaxScheme:
    return get_scheme("nta2025")


@pytest.fixture()
def bht_components() -> list[dict[str, object]]:
    """60/25/15 Basic/Housing/Transport split used across scenarios."""

    return [dict(component) for component in BHT_COMPONENTS]
