"""Statutory deduction calculations."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from payetax.backend.app.errors import ValidationError
from payetax.backend.app.models.domain import (
    ZERO,
    DeductionBreakdown,
    DeductionConfig,
    DeductionItem,
    SalaryComposition,
)
from payetax.backend.config.scheme_config import DEDUCTION_KINDS, DeductionRule

from .utils import MONTHS_PER_YEAR, ONE_HUNDRED, percent_of

if TYPE_CHECKING:  # pragma: no cover - typing only
    from payetax.backend.app.services.schemes import TaxScheme

_LOGGER = logging.getLogger(__name__)


def pensionable_emolument(composition: SalaryComposition, keys: tuple[str, ...]) -> Decimal:
    """Sum the monthly value of the components listed in ``keys`` (BHT by default)."""

    return sum((composition.value_for(key) for key in keys), ZERO)


def basic_salary(composition: SalaryComposition) -> Decimal:
    """Return the basic salary component, falling back to gross when none is declared."""

    if composition.has_component("basic"):
        return composition.value_for("basic")
    return composition.gross_monthly


def check_deduction_config(config: DeductionConfig, scheme: TaxScheme) -> None:
    """Reject enabled percentages above 100 once the scheme's bases are known."""

    for kind, rule in scheme.deduction_rules.items():
        setting = config.get(kind)
        if not setting.enabled or not rule.is_rate or setting.value is None:
            continue
        if rule.fixed_rate is not None:
            continue
        if setting.value > ONE_HUNDRED:
            raise ValidationError(
                f"Deduction '{kind}' rate {setting.value}% must be between 0 and 100",
                field=kind,
            )


def _monthly_base(
    rule: DeductionRule, composition: SalaryComposition, scheme: TaxScheme
) -> Decimal:
    if rule.basis == "pensionable_emolument":
        return scheme.pensionable_emolument(composition)
    if rule.basis == "basic_salary":
        return basic_salary(composition)
    return composition.gross_monthly


def _calculate_item(
    kind: str,
    rule: DeductionRule,
    composition: SalaryComposition,
    config: DeductionConfig,
    scheme: TaxScheme,
) -> DeductionItem:
    setting = config.get(kind)
    rate: Decimal | None = None
    base: Decimal | None = None

    if rule.is_rate:
        rate = scheme.deduction_rate(kind, setting)
        base = _monthly_base(rule, composition, scheme)

    if not setting.enabled:
        return DeductionItem(
            kind=kind, label=rule.label, monthly=ZERO, annual=ZERO, rate=rate, base=base
        )

    if rule.is_rate:
        monthly = percent_of(base, rate)
        annual = monthly * MONTHS_PER_YEAR
    elif rule.basis == "monthly_amount":
        monthly = setting.value or ZERO
        annual = monthly * MONTHS_PER_YEAR
    else:
        annual = setting.value or ZERO
        monthly = annual / MONTHS_PER_YEAR

    capped = False
    if rule.annual_cap_rate is not None:
        cap = composition.gross_monthly * MONTHS_PER_YEAR * rule.annual_cap_rate
        if annual > cap:
            annual = cap
            monthly = cap / MONTHS_PER_YEAR
            capped = True

    return DeductionItem(
        kind=kind,
        label=rule.label,
        monthly=monthly,
        annual=annual,
        rate=rate,
        base=base,
        capped=capped,
    )


def calculate_deductions(
    composition: SalaryComposition, config: DeductionConfig, scheme: TaxScheme
) -> DeductionBreakdown:
    """Compute every deduction the scheme defines; disabled ones contribute zero."""

    items: list[DeductionItem] = []
    for kind in DEDUCTION_KINDS:
        rule = scheme.deduction_rules.get(kind)
        if rule is None:
            if config.get(kind).enabled:
                _LOGGER.debug("Ignoring deduction '%s' not defined by scheme '%s'", kind, scheme.version)
            continue
        items.append(_calculate_item(kind, rule, composition, config, scheme))

    monthly_total = sum((item.monthly for item in items), ZERO)
    annual_total = sum((item.annual for item in items), ZERO)
    return DeductionBreakdown(
        items=tuple(items), monthly_total=monthly_total, annual_total=annual_total
    )


__all__ = [
    "basic_salary",
    "calculate_deductions",
    "check_deduction_config",
    "pensionable_emolument",
]
