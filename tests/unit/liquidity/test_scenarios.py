"""
FILE: tests/unit/liquidity/test_scenarios.py
"""

from datetime import date
from decimal import Decimal

import pytest

from src.core.liquidity.models import CustomRule, ScenarioAdjustments
from src.core.liquidity.scenarios import (
    SCENARIO_PRESETS,
    apply_adjustments,
    apply_scenario,
    get_preset,
    list_presets,
    localized_preset_name,
    max_pull_forward_days,
    merge_adjustments,
    summarize_adjustments,
    validate_adjustments,
)
from tests.factories import inflow, outflow

DAY = date(2026, 3, 1)


def test_presets_are_base_conservative_aggressive():
    presets = {preset.scenario_type: preset for preset in list_presets()}

    assert set(presets) == {"base", "conservative", "aggressive"}
    assert presets["base"].is_default is True
    assert presets["base"].adjustments == ScenarioAdjustments()
    conservative = presets["conservative"].adjustments
    assert conservative.inflow_haircut_pct == Decimal("15")
    assert conservative.outflow_increase_pct == Decimal("10")
    assert conservative.distribution_delay_days == 30
    assert conservative.capital_call_shift_days == 14
    assert conservative.rate_shock_bps == 50
    aggressive = presets["aggressive"].adjustments
    assert aggressive.inflow_haircut_pct == Decimal("-15")
    assert aggressive.rate_shock_bps == -50


def test_get_preset_returns_a_copy():
    preset = get_preset("conservative")
    preset.adjustments.custom_rules.append(
        CustomRule(field="category", operator="eq", value="fee", action="multiply", action_value=2)
    )

    assert SCENARIO_PRESETS["conservative"].adjustments.custom_rules == []


def test_preset_names_are_localized():
    assert localized_preset_name("conservative", "ru") == "Консервативный"
    assert localized_preset_name("conservative", "xx") == "Conservative"


@pytest.mark.parametrize(
    "field_name, value",
    [
        ("inflow_haircut_pct", Decimal("-100")),
        ("inflow_haircut_pct", Decimal("100")),
        ("outflow_increase_pct", Decimal("500")),
        ("distribution_delay_days", -365),
        ("capital_call_shift_days", 180),
        ("rate_shock_bps", 1000),
        ("rate_shock_bps", -500),
    ],
)
def test_validation_bounds_are_inclusive(field_name, value):
    result = validate_adjustments(ScenarioAdjustments(**{field_name: value}))

    assert result.valid is True
    assert result.errors == []


def test_validation_collects_every_violation():
    result = validate_adjustments(
        ScenarioAdjustments(
            inflow_haircut_pct=Decimal("100.5"),
            outflow_increase_pct=Decimal("501"),
            distribution_delay_days=366,
            capital_call_shift_days=-181,
            rate_shock_bps=-501,
        )
    )

    assert result.valid is False
    assert len(result.errors) == 5
    assert result.errors[0].startswith("inflow_haircut_pct must be between")


def test_merge_overrides_present_scalars_and_concatenates_rules():
    base_rule = CustomRule(
        field="category", operator="eq", value="fee", action="multiply", action_value=2
    )
    override_rule = CustomRule(
        field="amount", operator="gt", value="1000", action="add", action_value=-100
    )
    base = ScenarioAdjustments(
        inflow_haircut_pct=Decimal("10"), rate_shock_bps=25, custom_rules=[base_rule]
    )
    override = ScenarioAdjustments(rate_shock_bps=300, custom_rules=[override_rule])

    merged = merge_adjustments(base, override)

    assert merged.inflow_haircut_pct == Decimal("10")
    assert merged.rate_shock_bps == 300
    assert merged.custom_rules == [base_rule, override_rule]
    assert base.rate_shock_bps == 25


def test_summary_lists_only_non_zero_fields():
    summary = summarize_adjustments(
        ScenarioAdjustments(
            inflow_haircut_pct=Decimal("15"),
            outflow_increase_pct=Decimal("0"),
            capital_call_shift_days=-14,
        )
    )

    assert summary == "inflows reduced by 15%, capital calls 14 days later"


def test_summary_uses_direction_aware_phrases():
    summary = summarize_adjustments(get_preset("aggressive").adjustments)

    assert "inflows increased by 15%" in summary
    assert "outflows reduced by 10%" in summary
    assert "rates down 50bp" in summary


def test_summary_without_adjustments():
    assert summarize_adjustments(ScenarioAdjustments()) == "No adjustments"
    assert summarize_adjustments(ScenarioAdjustments(), "ru") == "Без корректировок"


def test_apply_scenario_does_not_mutate_inputs():
    flows = [
        inflow("in_1", "1000", DAY, category="distribution"),
        outflow("out_1", "1000", DAY, category="capital_call"),
    ]

    adjusted = apply_scenario(flows, get_preset("conservative"))

    assert flows[0].amount == Decimal("1000")
    assert flows[0].flow_date == DAY
    assert adjusted[0].amount == Decimal("850.00")
    assert adjusted[0].flow_date == date(2026, 3, 31)
    assert adjusted[1].amount == Decimal("1100.00")
    assert adjusted[1].flow_date == date(2026, 2, 15)


def test_rate_shock_only_applies_to_debt_outflows():
    flows = [
        outflow("debt_1", "10000", DAY, category="debt"),
        outflow("rent_1", "10000", DAY, category="rent"),
    ]

    adjusted = apply_adjustments(flows, ScenarioAdjustments(rate_shock_bps=100))

    assert adjusted[0].amount == Decimal("10100.00")
    assert adjusted[1].amount == Decimal("10000")


def test_debt_outflow_receives_increase_and_shock():
    adjusted = apply_adjustments(
        [outflow("debt_1", "10000", DAY, category="debt")],
        ScenarioAdjustments(outflow_increase_pct=Decimal("10"), rate_shock_bps=100),
    )

    assert adjusted[0].amount == Decimal("11110.00")


def test_no_scenario_returns_flows_unchanged():
    flows = [inflow("in_1", "1000", DAY)]

    assert apply_scenario(flows, None) == flows


def test_custom_rules_run_after_builtin_adjustments():
    rules = [
        CustomRule(field="category", operator="eq", value="fee", action="multiply", action_value=2),
        CustomRule(field="amount", operator="gte", value="2000", action="delay", action_value=5),
    ]
    flows = [
        outflow("fee_1", "1000", DAY, category="fee"),
        outflow("rent_1", "1000", DAY, category="rent"),
    ]

    adjusted = apply_adjustments(
        flows, ScenarioAdjustments(outflow_increase_pct=Decimal("10"), custom_rules=rules)
    )

    assert adjusted[0].amount == Decimal("2200.00")
    assert adjusted[0].flow_date == date(2026, 3, 6)
    assert adjusted[1].amount == Decimal("1100.00")
    assert adjusted[1].flow_date == DAY


def test_custom_add_rule_never_goes_negative():
    rule = CustomRule(
        field="flow_type", operator="eq", value="inflow", action="add", action_value=-5000
    )

    adjusted = apply_adjustments(
        [inflow("in_1", "1000", DAY)], ScenarioAdjustments(custom_rules=[rule])
    )

    assert adjusted[0].amount == Decimal("0.00")


def test_custom_multiply_rule_with_negative_factor_floors_at_zero():
    rule = CustomRule(
        field="category", operator="eq", value="fee", action="multiply", action_value=-2
    )

    adjusted = apply_adjustments(
        [outflow("fee_1", "1000", DAY, category="fee")], ScenarioAdjustments(custom_rules=[rule])
    )

    assert adjusted[0].amount == Decimal("0.00")


def test_validation_rejects_negative_multiply_factor():
    rule = CustomRule(
        field="category", operator="eq", value="fee", action="multiply", action_value=-2
    )

    result = validate_adjustments(ScenarioAdjustments(custom_rules=[rule]))

    assert result.valid is False
    assert result.errors == ["custom_rules[0].action_value must be >= 0 for multiply"]


def test_max_pull_forward_days_covers_shifts_and_negative_delays():
    early_delay = CustomRule(
        field="category", operator="eq", value="tax", action="delay", action_value=-45
    )

    assert max_pull_forward_days(ScenarioAdjustments()) == 0
    assert max_pull_forward_days(get_preset("conservative").adjustments) == 14
    assert max_pull_forward_days(get_preset("aggressive").adjustments) == 30
    assert max_pull_forward_days(ScenarioAdjustments(custom_rules=[early_delay])) == 45


def test_conservative_never_raises_inflows_or_lowers_outflows():
    flows = [
        inflow("in_1", "1000", DAY),
        inflow("in_2", "5000", DAY, category="distribution"),
        outflow("out_1", "700", DAY, category="debt"),
        outflow("out_2", "300", DAY, category="capital_call"),
    ]

    adjusted = apply_scenario(flows, get_preset("conservative"))

    for original, changed in zip(flows, adjusted):
        if original.flow_type == "inflow":
            assert changed.amount <= original.amount
        else:
            assert changed.amount >= original.amount
