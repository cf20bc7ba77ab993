"""Salary composition validation and percentage/value conversion."""

from __future__ import annotations

from decimal import Decimal

import pytest

from payetax.backend.app.errors import ValidationError
from payetax.backend.app.models import SalaryComponent
from payetax.backend.app.services.calculators import (
    component_percentage,
    component_value,
    validate_composition,
)


def test_percentage_components_derive_values(bht_components) -> None:
    composition = validate_composition(bht_components, 500000)

    assert composition.gross_monthly == Decimal("500000")
    assert composition.total_percentage == Decimal("100")
    assert [component.value for component in composition.components] == [
        Decimal("300000"),
        Decimal("125000"),
        Decimal("75000"),
    ]
    assert composition.value_for("basic") == Decimal("300000")
    assert composition.has_component("transport")


def test_mismatched_total_reports_percentage(bht_components) -> None:
    bht_components[2]["percentage"] = 12

    with pytest.raises(ValidationError) as excinfo:
        validate_composition(bht_components, 500000)

    assert excinfo.value.total == Decimal("97")
    assert "97.0%" in excinfo.value.message
    assert excinfo.value.field == "components"


def test_total_within_tolerance_is_accepted() -> None:
    components = [
        {"name": "Basic", "percentage": "33.33"},
        {"name": "Housing", "percentage": "33.33"},
        {"name": "Transport", "percentage": "33.33"},
    ]

    composition = validate_composition(components, 300000)

    assert composition.total_percentage == Decimal("99.99")


def test_total_outside_tolerance_is_rejected() -> None:
    components = [
        {"name": "Basic", "percentage": "59.8"},
        {"name": "Housing", "percentage": 40},
    ]

    with pytest.raises(ValidationError):
        validate_composition(components, 300000)


@pytest.mark.parametrize("gross", [0, -1, "0.00"])
def test_gross_must_be_positive(bht_components, gross) -> None:
    with pytest.raises(ValidationError, match="greater than zero"):
        validate_composition(bht_components, gross)


@pytest.mark.parametrize("gross", ["NaN", "Infinity", float("nan"), float("inf")])
def test_non_finite_gross_is_rejected(bht_components, gross) -> None:
    with pytest.raises(ValidationError, match="gross_monthly"):
        validate_composition(bht_components, gross)


@pytest.mark.parametrize("percentage", ["NaN", "-Infinity", float("nan"), float("inf")])
def test_non_finite_percentage_is_rejected(percentage) -> None:
    components = [
        {"name": "Basic", "percentage": percentage},
        {"name": "Housing", "percentage": 100},
    ]

    with pytest.raises(ValidationError):
        validate_composition(components, 100000)


def test_components_sharing_a_first_word_are_rejected() -> None:
    components = [
        {"name": "Basic Salary", "percentage": 60},
        {"name": "Basic Allowance", "percentage": 40},
    ]

    with pytest.raises(ValidationError, match="share the key 'basic'") as excinfo:
        validate_composition(components, 100000)

    assert excinfo.value.field == "components"


def test_empty_components_are_rejected() -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_composition([], 100000)

    assert excinfo.value.total == Decimal("0")


def test_mixed_modes_are_rejected() -> None:
    components = [
        {"name": "Basic", "percentage": 60},
        {"name": "Housing", "value": 200000},
    ]

    with pytest.raises(ValidationError, match="all be percentage-driven or all value-driven"):
        validate_composition(components, 500000)


def test_percentage_components_need_gross(bht_components) -> None:
    with pytest.raises(ValidationError, match="required"):
        validate_composition(bht_components)


def test_value_components_default_gross_to_their_sum() -> None:
    components = [
        SalaryComponent(name="Basic Salary", value=Decimal("300000")),
        SalaryComponent(name="Housing", value=Decimal("125000")),
        SalaryComponent(name="Transport", value=Decimal("75000")),
    ]

    composition = validate_composition(components)

    assert composition.gross_monthly == Decimal("500000")
    assert [component.percentage for component in composition.components] == [
        Decimal("60"),
        Decimal("25"),
        Decimal("15"),
    ]


def test_value_components_must_add_up_to_gross() -> None:
    components = [{"name": "Basic", "value": 400000}]

    with pytest.raises(ValidationError) as excinfo:
        validate_composition(components, 500000)

    assert excinfo.value.total == Decimal("80")


def test_revalidating_with_new_gross_recomputes_values(bht_components) -> None:
    composition = validate_composition(bht_components, 500000)

    updated = validate_composition(composition.components, 800000)

    assert updated.value_for("basic") == Decimal("480000")
    assert updated.value_for("housing") == Decimal("200000")


@pytest.mark.parametrize(
    "component",
    [
        {"name": "", "percentage": 100},
        {"name": "Basic"},
        {"name": "Basic", "percentage": -5},
        {"name": "Basic", "value": "abc"},
        {"name": "Basic", "percentage": "NaN"},
        {"name": "Basic", "value": "Infinity"},
    ],
)
def test_invalid_components_are_rejected(component) -> None:
    with pytest.raises(ValidationError):
        validate_composition([component], 100000)


@pytest.mark.parametrize("percentage", ["12.5", "60", "0.25", "100"])
def test_percentage_value_round_trip(percentage: str) -> None:
    gross = Decimal("500000")
    value = component_value(Decimal(percentage), gross)

    assert component_percentage(value, gross) == Decimal(percentage)


def test_component_percentage_of_zero_gross_is_zero() -> None:
    assert component_percentage(Decimal("100"), Decimal("0")) == Decimal("0")
