"""
FILE: src/core/liquidity/scenarios.py
Scenario presets, validation, merging, summaries and the flow adjustment transform.
"""

from datetime import timedelta
from decimal import Decimal
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional

from src.core.common.money import quantize_amount_for_currency
from src.core.liquidity import messages
from src.core.liquidity.models import (
    CashFlow,
    CashScenario,
    CustomRule,
    ScenarioAdjustments,
    ScenarioValidationResult,
)

_HUNDRED = Decimal("100")
_BPS = Decimal("10000")

SCALAR_ADJUSTMENT_FIELDS = (
    "inflow_haircut_pct",
    "outflow_increase_pct",
    "distribution_delay_days",
    "capital_call_shift_days",
    "rate_shock_bps",
)

ADJUSTMENT_BOUNDS: Mapping[str, tuple[Decimal, Decimal]] = MappingProxyType(
    {
        "inflow_haircut_pct": (Decimal("-100"), Decimal("100")),
        "outflow_increase_pct": (Decimal("-100"), Decimal("500")),
        "distribution_delay_days": (Decimal("-365"), Decimal("365")),
        "capital_call_shift_days": (Decimal("-180"), Decimal("180")),
        "rate_shock_bps": (Decimal("-500"), Decimal("1000")),
    }
)

_ADJUSTMENT_UNITS = {
    "inflow_haircut_pct": "%",
    "outflow_increase_pct": "%",
    "distribution_delay_days": " days",
    "capital_call_shift_days": " days",
    "rate_shock_bps": "bp",
}


def _preset(scenario_type: str, adjustments: ScenarioAdjustments) -> CashScenario:
    return CashScenario(
        scenario_id=f"scn_{scenario_type}",
        name=messages.SCENARIO_NAMES["en"][scenario_type],
        scenario_type=scenario_type,
        is_default=scenario_type == "base",
        adjustments=adjustments,
    )


SCENARIO_PRESETS: Mapping[str, CashScenario] = MappingProxyType(
    {
        "base": _preset("base", ScenarioAdjustments()),
        "conservative": _preset(
            "conservative",
            ScenarioAdjustments(
                inflow_haircut_pct=Decimal("15"),
                outflow_increase_pct=Decimal("10"),
                distribution_delay_days=30,
                capital_call_shift_days=14,
                rate_shock_bps=50,
            ),
        ),
        "aggressive": _preset(
            "aggressive",
            ScenarioAdjustments(
                inflow_haircut_pct=Decimal("-15"),
                outflow_increase_pct=Decimal("-10"),
                distribution_delay_days=-30,
                capital_call_shift_days=-14,
                rate_shock_bps=-50,
            ),
        ),
    }
)


def get_preset(scenario_type: str) -> CashScenario:
    # Callers receive a copy so the shared table is never mutated.
    return SCENARIO_PRESETS[scenario_type].model_copy(deep=True)


def list_presets() -> list[CashScenario]:
    return [get_preset(key) for key in SCENARIO_PRESETS]


def localized_preset_name(scenario_type: str, locale: str) -> str:
    return messages.SCENARIO_NAMES[messages.resolve_locale(locale)][scenario_type]


def validate_adjustments(adjustments: ScenarioAdjustments) -> ScenarioValidationResult:
    errors: list[str] = []
    for field_name, (lower, upper) in ADJUSTMENT_BOUNDS.items():
        value = getattr(adjustments, field_name)
        if value is None:
            continue
        if value < lower or value > upper:
            unit = _ADJUSTMENT_UNITS[field_name]
            errors.append(f"{field_name} must be between {lower}{unit} and {upper}{unit}")
    for index, rule in enumerate(adjustments.custom_rules):
        if rule.field == "amount" and not _is_decimal_like(rule.value):
            errors.append(f"custom_rules[{index}].value must be numeric for field 'amount'")
        if rule.action == "delay" and rule.action_value != rule.action_value.to_integral_value():
            errors.append(f"custom_rules[{index}].action_value must be whole days for 'delay'")
        if rule.action == "multiply" and rule.action_value < 0:
            errors.append(f"custom_rules[{index}].action_value must be >= 0 for 'multiply'")
    return ScenarioValidationResult(valid=not errors, errors=errors)


def validate_scenario(scenario: CashScenario) -> ScenarioValidationResult:
    return validate_adjustments(scenario.adjustments)


def merge_adjustments(
    base: ScenarioAdjustments, override: ScenarioAdjustments
) -> ScenarioAdjustments:
    """Overlay ``override`` onto ``base``.

    Scalar fields set on the override win; custom rules are concatenated, base first.
    """
    merged = {
        field_name: (
            getattr(override, field_name)
            if getattr(override, field_name) is not None
            else getattr(base, field_name)
        )
        for field_name in SCALAR_ADJUSTMENT_FIELDS
    }
    return ScenarioAdjustments(
        **merged,
        custom_rules=[*base.custom_rules, *override.custom_rules],
    )


def summarize_adjustments(adjustments: ScenarioAdjustments, locale: str = "en") -> str:
    parts = []
    for field_name in SCALAR_ADJUSTMENT_FIELDS:
        value = getattr(adjustments, field_name)
        if not value:
            continue
        parts.append(messages.adjustment_phrase(field_name, value, locale))
    if adjustments.custom_rules:
        parts.append(messages.custom_rules_phrase(len(adjustments.custom_rules), locale))
    if not parts:
        return messages.no_adjustments(locale)
    return ", ".join(parts)


def _is_decimal_like(value) -> bool:
    if isinstance(value, bool):
        return False
    try:
        Decimal(str(value))
    except ArithmeticError:
        return False
    return True


def _pct_multiplier(pct: Optional[Decimal], *, sign: int) -> Decimal:
    return Decimal("1") + sign * (pct or Decimal("0")) / _HUNDRED


def _apply_inflow_haircut(flow: CashFlow, adj: ScenarioAdjustments) -> dict:
    if not adj.inflow_haircut_pct:
        return {}
    return {"amount": flow.amount * _pct_multiplier(adj.inflow_haircut_pct, sign=-1)}


def _apply_outflow_increase(flow: CashFlow, adj: ScenarioAdjustments) -> dict:
    if not adj.outflow_increase_pct:
        return {}
    return {"amount": flow.amount * _pct_multiplier(adj.outflow_increase_pct, sign=1)}


def _delay_distribution(flow: CashFlow, adj: ScenarioAdjustments) -> dict:
    if not adj.distribution_delay_days:
        return {}
    return {"flow_date": flow.flow_date + timedelta(days=adj.distribution_delay_days)}


def _pull_capital_call_earlier(flow: CashFlow, adj: ScenarioAdjustments) -> dict:
    if not adj.capital_call_shift_days:
        return {}
    return {"flow_date": flow.flow_date - timedelta(days=adj.capital_call_shift_days)}


def _shock_debt_rate(flow: CashFlow, adj: ScenarioAdjustments) -> dict:
    if not adj.rate_shock_bps:
        return {}
    return {"amount": flow.amount * (Decimal("1") + Decimal(adj.rate_shock_bps) / _BPS)}


Adjustment = Callable[[CashFlow, ScenarioAdjustments], dict]

DIRECTIONAL_ADJUSTMENTS: Mapping[str, Adjustment] = MappingProxyType(
    {
        "inflow": _apply_inflow_haircut,
        "outflow": _apply_outflow_increase,
    }
)

CATEGORY_ADJUSTMENTS: Mapping[tuple[str, str], Adjustment] = MappingProxyType(
    {
        ("inflow", "distribution"): _delay_distribution,
        ("outflow", "capital_call"): _pull_capital_call_earlier,
        ("outflow", "debt"): _shock_debt_rate,
    }
)


def _compare(left, operator: str, right) -> bool:
    if operator == "eq":
        return left == right
    if operator == "neq":
        return left != right
    if operator == "lt":
        return left < right
    if operator == "lte":
        return left <= right
    if operator == "gt":
        return left > right
    if operator == "gte":
        return left >= right
    return False


def _coerce_rule_operand(rule: CustomRule):
    if rule.field == "amount":
        return Decimal(str(rule.value))
    if rule.field == "is_confirmed":
        if isinstance(rule.value, bool):
            return rule.value
        return str(rule.value).strip().lower() in {"1", "true", "yes"}
    return str(rule.value)


def custom_rule_matches(rule: CustomRule, flow: CashFlow) -> bool:
    try:
        operand = _coerce_rule_operand(rule)
    except ArithmeticError:
        return False
    try:
        return _compare(getattr(flow, rule.field), rule.operator, operand)
    except TypeError:
        return False


def _apply_custom_rule(flow: CashFlow, rule: CustomRule) -> CashFlow:
    # Amounts are unsigned; direction lives in flow_type.
    if rule.action == "multiply":
        floored = max(Decimal("0"), flow.amount * rule.action_value)
        return flow.model_copy(update={"amount": floored})
    if rule.action == "add":
        floored = max(Decimal("0"), flow.amount + rule.action_value)
        return flow.model_copy(update={"amount": floored})
    return flow.model_copy(
        update={"flow_date": flow.flow_date + timedelta(days=int(rule.action_value))}
    )


def adjust_flow(flow: CashFlow, adjustments: ScenarioAdjustments) -> CashFlow:
    update: dict = {}
    directional = DIRECTIONAL_ADJUSTMENTS[flow.flow_type](flow, adjustments)
    update.update(directional)
    categorical = CATEGORY_ADJUSTMENTS.get((flow.flow_type, flow.category))
    if categorical is not None:
        # Category adjustments see the directional amount, never the raw one.
        staged = flow.model_copy(update=update) if update else flow
        update.update(categorical(staged, adjustments))
    adjusted = flow.model_copy(update=update) if update else flow
    for rule in adjustments.custom_rules:
        if custom_rule_matches(rule, adjusted):
            adjusted = _apply_custom_rule(adjusted, rule)
    if adjusted is flow:
        return flow
    return adjusted.model_copy(
        update={"amount": quantize_amount_for_currency(adjusted.amount, adjusted.currency)}
    )


def max_pull_forward_days(adjustments: ScenarioAdjustments) -> int:
    """Largest number of days any flow can be moved earlier by these adjustments."""
    candidates = [
        0,
        adjustments.capital_call_shift_days or 0,
        -(adjustments.distribution_delay_days or 0),
    ]
    candidates.extend(
        -int(rule.action_value) for rule in adjustments.custom_rules if rule.action == "delay"
    )
    return max(candidates)


def apply_scenario(
    flows: Iterable[CashFlow], scenario: Optional[CashScenario]
) -> list[CashFlow]:
    """Return a new flow list with the scenario's adjustments applied.

    The input flows are never modified. With no scenario the flows are returned as a
    fresh list unchanged.
    """
    if scenario is None:
        return list(flows)
    return apply_adjustments(flows, scenario.adjustments)


def apply_adjustments(
    flows: Iterable[CashFlow], adjustments: ScenarioAdjustments
) -> list[CashFlow]:
    return [adjust_flow(flow, adjustments) for flow in flows]
