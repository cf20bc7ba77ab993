"""Integration tests for scheme configuration endpoints."""

from http import HTTPStatus

from flask.testing import FlaskClient

from payetax.backend.version import get_project_version


def test_list_schemes(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/schemes")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["default_scheme"] == "nta2025"
    assert payload["supported_schemes"] == ["legacy", "nta2025"]
    assert [scheme["version"] for scheme in payload["schemes"]] == ["legacy", "nta2025"]


def test_scheme_detail_exposes_bands_and_relief(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/schemes/legacy")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["label"] == "Legacy PAYE (PITA 2011)"
    assert [band["rate_label"] for band in payload["bands"]] == [
        "7%",
        "11%",
        "15%",
        "19%",
        "21%",
        "24%",
    ]
    assert payload["bands"][-1]["width"] is None
    assert payload["relief"] == {
        "fixed_amount": 200000.0,
        "gross_rate": 0.2,
        "floor_rate": None,
    }


def test_scheme_detail_describes_deduction_inputs(client: FlaskClient) -> None:
    legacy = client.get("/api/v1/config/schemes/legacy").get_json()
    nta = client.get("/api/v1/config/schemes/NTA2025").get_json()

    legacy_inputs = {entry["kind"]: entry["input"] for entry in legacy["deductions"]}
    nta_inputs = {entry["kind"]: entry["input"] for entry in nta["deductions"]}

    assert legacy_inputs["life_assurance"] == "percentage"
    assert nta_inputs["life_assurance"] == "amount"
    assert "mortgage_interest" not in legacy_inputs
    assert nta["effective_from"] == "2026-01-01"


def test_unknown_scheme_returns_not_found(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/schemes/pita1993")

    assert response.status_code == HTTPStatus.NOT_FOUND
    payload = response.get_json()
    assert payload["error"] == "not_found"


def test_meta_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/meta")

    assert response.status_code == HTTPStatus.OK
    assert response.get_json() == {
        "version": get_project_version(),
        "supported_schemes": ["legacy", "nta2025"],
        "default_scheme": "nta2025",
    }
