"""Unit tests for the calculation service."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from payetax.backend.app.errors import ValidationError
from payetax.backend.app.models import CalculationRequest
from payetax.backend.app.services.calculation_service import (
    calculate_batch,
    calculate_paye,
    calculate_pension,
)


def _payload(bht_components, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "scheme": "legacy",
        "gross_monthly": 500000,
        "components": bht_components,
        "deductions": {"statutory_pension": {"enabled": True}},
    }
    payload.update(overrides)
    return payload


def test_calculate_paye_rounds_summary(bht_components) -> None:
    result = calculate_paye(_payload(bht_components))

    summary = result["summary"]
    assert summary["annual_gross"] == 6000000.0
    assert summary["annual_cra"] == 1400000.0
    assert summary["taxable_income"] == 4120000.0
    assert summary["annual_tax"] == 780800.0
    assert summary["monthly_tax"] == 65066.67
    assert summary["monthly_net_pay"] == 394933.33
    assert summary["effective_tax_rate"] == 0.1301
    assert result["meta"] == {"scheme": "legacy", "scheme_label": "Legacy PAYE (PITA 2011)"}


def test_calculate_paye_lists_bands_and_deductions(bht_components) -> None:
    result = calculate_paye(_payload(bht_components))

    bands = result["tax_bands"]
    assert [band["rate_label"] for band in bands] == ["7%", "11%", "15%", "19%", "21%", "24%"]
    assert bands[-1]["taxable_amount"] == 920000.0

    deductions = {item["kind"]: item for item in result["deductions"]}
    assert deductions["statutory_pension"]["monthly"] == 40000.0
    assert deductions["nhf"]["monthly"] == 0.0
    assert "mortgage_interest" not in deductions

    assert result["relief"]["total"] == 1400000.0
    assert [component["value"] for component in result["components"]] == [
        300000.0,
        125000.0,
        75000.0,
    ]


def test_calculate_paye_accepts_request_model(bht_components) -> None:
    request = CalculationRequest.model_validate(_payload(bht_components, scheme="nta2025"))

    result = calculate_paye(request)

    assert result["summary"]["annual_tax"] == 531600.0
    assert result["meta"]["scheme"] == "nta2025"


def test_calculate_paye_echoes_employee_id(bht_components) -> None:
    result = calculate_paye(_payload(bht_components, employee_id="EMP-7"))

    assert result["meta"]["employee_id"] == "EMP-7"


def test_percentage_mismatch_carries_total(bht_components) -> None:
    bht_components[1]["percentage"] = 22

    with pytest.raises(ValidationError) as excinfo:
        calculate_paye(_payload(bht_components))

    assert float(excinfo.value.total) == 97.0


@pytest.mark.parametrize(
    ("overrides", "fragment"),
    [
        ({"components": "basic"}, "components"),
        ({"deductions": {"gym": {"enabled": True}}}, "unknown deduction kinds"),
        ({"unexpected": True}, "unexpected"),
    ],
)
def test_invalid_payload_is_reported(bht_components, overrides, fragment: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        calculate_paye(_payload(bht_components, **overrides))

    assert excinfo.value.message.startswith("Invalid calculation payload")
    assert fragment in excinfo.value.message


def test_negative_percentage_message_is_friendly(bht_components) -> None:
    bht_components[0]["percentage"] = -60

    with pytest.raises(ValidationError, match="components.0.percentage: value cannot be negative"):
        calculate_paye(_payload(bht_components))


def test_non_mapping_payload_is_rejected() -> None:
    with pytest.raises(ValidationError, match="mapping"):
        calculate_paye(["not", "a", "mapping"])  # type: ignore[arg-type]


def test_profiling_logs_timings(
    bht_components, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("PAYETAX_PROFILE_CALCULATIONS", "true")
    caplog.set_level(logging.DEBUG, logger="payetax.backend.app.services.calculation_service")

    calculate_paye(_payload(bht_components))

    assert any("calculate_paye timings" in record.getMessage() for record in caplog.records)


def test_calculate_batch_totals(bht_components) -> None:
    payload = {
        "scheme": "legacy",
        "employees": [
            {
                "employee_id": "A",
                "gross_monthly": 500000,
                "components": bht_components,
                "deductions": {"statutory_pension": {"enabled": True}},
            },
            {"employee_id": "B", "gross_monthly": 10000, "components": bht_components},
        ],
    }

    result = calculate_batch(payload)

    assert result["scheme"] == "legacy"
    assert [entry["meta"]["employee_id"] for entry in result["results"]] == ["A", "B"]
    assert result["totals"]["gross_monthly"] == 510000.0
    assert result["totals"]["annual_tax"] == 780800.0
    assert result["totals"]["monthly_tax"] == 65066.67


def test_calculate_batch_requires_employees() -> None:
    with pytest.raises(ValidationError, match="employees"):
        calculate_batch({"scheme": "legacy", "employees": []})


def test_calculate_pension(bht_components) -> None:
    result = calculate_pension(
        {"scheme": "nta2025", "gross_monthly": 500000, "components": bht_components}
    )

    assert result["employee_rate"] == 8.0
    assert result["employer_rate"] == 10.0
    assert result["employee_monthly"] == 40000.0
    assert result["employer_monthly"] == 50000.0
    assert result["total_annual"] == 1080000.0


def test_calculate_pension_rejects_out_of_range_rate(bht_components) -> None:
    with pytest.raises(ValidationError, match="employee_rate"):
        calculate_pension(
            {"gross_monthly": 500000, "components": bht_components, "employee_rate": 120}
        )
