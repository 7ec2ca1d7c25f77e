"""
FILE: src/core/liquidity/stress.py
Archetype-driven stress overlays and their impact against a baseline forecast.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from src.core.liquidity import messages
from src.core.liquidity.forecast import build_forecast, compare_forecast_results
from src.core.liquidity.models import (
    CashFlow,
    CashPosition,
    CashScenario,
    CashStressTest,
    ForecastResult,
    ScenarioAdjustments,
    StressComparison,
    StressParams,
    StressResult,
)
from src.core.liquidity.scenarios import merge_adjustments

logger = logging.getLogger(__name__)

# archetype -> (StressParams override field, ScenarioAdjustments target field)
ARCHETYPE_MAPPING: Mapping[str, tuple[str, str]] = MappingProxyType(
    {
        "market_drawdown": ("drawdown_percent", "inflow_haircut_pct"),
        "delayed_distributions": ("delay_days", "distribution_delay_days"),
        "tax_spike": ("tax_increase_percent", "outflow_increase_pct"),
        "debt_rate_shock": ("rate_shock_bps", "rate_shock_bps"),
        "capital_call_acceleration": ("acceleration_days", "capital_call_shift_days"),
    }
)

SEVERITY_DEFAULTS: Mapping[str, Mapping[str, Decimal | int]] = MappingProxyType(
    {
        "market_drawdown": MappingProxyType(
            {"mild": Decimal("10"), "moderate": Decimal("25"), "severe": Decimal("40")}
        ),
        "delayed_distributions": MappingProxyType({"mild": 30, "moderate": 90, "severe": 180}),
        "tax_spike": MappingProxyType(
            {"mild": Decimal("10"), "moderate": Decimal("25"), "severe": Decimal("50")}
        ),
        "debt_rate_shock": MappingProxyType({"mild": 100, "moderate": 250, "severe": 500}),
        "capital_call_acceleration": MappingProxyType({"mild": 30, "moderate": 60, "severe": 90}),
    }
)


def stress_magnitude(stress_type: str, params: StressParams) -> Decimal | int:
    override_field, _ = ARCHETYPE_MAPPING[stress_type]
    override = getattr(params, override_field)
    if override is not None:
        return override
    return SEVERITY_DEFAULTS[stress_type][params.severity]


def build_stress_adjustments(stress_type: str, params: StressParams) -> ScenarioAdjustments:
    _, target_field = ARCHETYPE_MAPPING[stress_type]
    return ScenarioAdjustments(**{target_field: stress_magnitude(stress_type, params)})


def _recovery_date(result: ForecastResult) -> Optional[date]:
    first_breach = result.first_deficit_date
    if first_breach is None:
        return None
    for day in result.daily_balances:
        if day.balance_date > first_breach and day.closing_balance >= result.min_cash_threshold:
            return day.balance_date
    return None


def run_stress_test(
    stress_test: CashStressTest,
    *,
    positions: Sequence[CashPosition],
    flows: Sequence[CashFlow],
    horizon_days: int,
    start_date: date,
    min_cash_threshold: Decimal = Decimal("0"),
    base_scenario: Optional[CashScenario] = None,
    baseline: Optional[ForecastResult] = None,
    run_at: Optional[datetime] = None,
    locale: str = "en",
) -> CashStressTest:
    """Run one stress test and return a copy of it carrying the result payload.

    The stress overlay is merged over the base scenario's adjustments, with stress
    values winning on overlap. When no baseline is supplied it is forecast from the
    same inputs under the base scenario alone.
    """
    base_adjustments = (
        base_scenario.adjustments if base_scenario is not None else ScenarioAdjustments()
    )
    overlay = build_stress_adjustments(stress_test.stress_type, stress_test.params)
    effective = merge_adjustments(base_adjustments, overlay)

    if baseline is None:
        baseline = build_forecast(
            positions=positions,
            flows=flows,
            horizon_days=horizon_days,
            start_date=start_date,
            min_cash_threshold=min_cash_threshold,
            scenario=base_scenario,
        )
    stressed = build_forecast(
        positions=positions,
        flows=flows,
        horizon_days=horizon_days,
        start_date=start_date,
        min_cash_threshold=min_cash_threshold,
        scenario=base_scenario,
        adjustments=effective,
    )

    comparison = compare_forecast_results(baseline, stressed)
    shortfall = max(Decimal("0"), min_cash_threshold - stressed.min_balance)
    currency = stressed.currency or "USD"
    impact_summary = messages.stress_impact_line(
        stress_type=stress_test.stress_type,
        severity=stress_test.params.severity,
        min_cash=messages.format_currency(stressed.min_balance, currency),
        when=messages.format_date(stressed.min_balance_date, locale),
        delta=messages.format_signed_currency(comparison.min_balance_diff, currency),
        breaches=stressed.deficit_days,
        shortfall=messages.format_currency(shortfall, currency),
        locale=locale,
    )
    logger.debug(
        "Stress test evaluated. stress_test_id=%s type=%s severity=%s breaches=%s",
        stress_test.stress_test_id,
        stress_test.stress_type,
        stress_test.params.severity,
        stressed.deficit_days,
    )

    result = StressResult(
        min_cash_reached=stressed.min_balance,
        min_cash_date=stressed.min_balance_date,
        breaches_count=stressed.deficit_days,
        breach_dates=list(stressed.deficit_dates),
        total_shortfall=shortfall,
        recovery_date=_recovery_date(stressed),
        impact_summary=impact_summary,
        comparison=StressComparison(
            min_balance_delta=comparison.min_balance_diff,
            deficit_days_delta=comparison.deficit_days_diff,
            variance_percent=comparison.variance_percent,
        ),
        alerts_generated=1 if stressed.deficit_days > 0 else 0,
        applied_adjustments=effective,
        daily_balances=stressed.daily_balances,
    )
    return stress_test.model_copy(update={"result": result, "run_at": run_at})
