"""Request/response models and engine value objects.

Pydantic models in :mod:`.api` guard the HTTP boundary; the frozen
dataclasses in :mod:`.domain` are what the payroll engine consumes and
returns. Both are re-exported so callers can import from one place.
"""

from .api import (
    BatchCalculationRequest,
    BatchCalculationResponse,
    CalculationRequest,
    CalculationResponse,
    ComponentEntry,
    DeductionEntry,
    DeductionSettingInput,
    EmployeeInput,
    PensionContributionRequest,
    PensionContributionResponse,
    ReliefEntry,
    ResponseMeta,
    SalaryComponentInput,
    Summary,
    TaxBandEntry,
    format_validation_error,
)
from .domain import (
    ZERO,
    BandAllocation,
    CalculationResult,
    DeductionBreakdown,
    DeductionConfig,
    DeductionItem,
    DeductionSetting,
    PensionContribution,
    ProgressiveTaxResult,
    ReliefBreakdown,
    SalaryComponent,
    SalaryComposition,
    component_key,
    to_money,
)

__all__ = [
    "BandAllocation",
    "BatchCalculationRequest",
    "BatchCalculationResponse",
    "CalculationRequest",
    "CalculationResponse",
    "CalculationResult",
    "ComponentEntry",
    "DeductionBreakdown",
    "DeductionConfig",
    "DeductionEntry",
    "DeductionItem",
    "DeductionSetting",
    "DeductionSettingInput",
    "EmployeeInput",
    "PensionContribution",
    "PensionContributionRequest",
    "PensionContributionResponse",
    "ProgressiveTaxResult",
    "ReliefBreakdown",
    "ReliefEntry",
    "ResponseMeta",
    "SalaryComponent",
    "SalaryComponentInput",
    "SalaryComposition",
    "Summary",
    "TaxBandEntry",
    "ZERO",
    "component_key",
    "format_validation_error",
    "to_money",
]
