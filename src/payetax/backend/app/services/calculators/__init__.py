"""Domain-specific calculation helpers."""

from .composition import (
    PERCENTAGE_TOLERANCE,
    component_percentage,
    component_value,
    validate_composition,
)
from .deductions import (
    basic_salary,
    calculate_deductions,
    check_deduction_config,
    pensionable_emolument,
)
from .pension import calculate_pension_contribution
from .progressive import calculate_progressive_tax
from .relief import calculate_relief, flat_floor_relief, scaled_floor_relief
from .utils import (
    MONTHS_PER_YEAR,
    format_percentage,
    percent_of,
    round_currency,
    round_rate,
)

__all__ = [
    "MONTHS_PER_YEAR",
    "PERCENTAGE_TOLERANCE",
    "basic_salary",
    "calculate_deductions",
    "calculate_pension_contribution",
    "calculate_progressive_tax",
    "calculate_relief",
    "check_deduction_config",
    "component_percentage",
    "component_value",
    "flat_floor_relief",
    "format_percentage",
    "pensionable_emolument",
    "percent_of",
    "round_currency",
    "round_rate",
    "scaled_floor_relief",
    "validate_composition",
]
