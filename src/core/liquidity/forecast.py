"""
FILE: src/core/liquidity/forecast.py
Daily cash-balance projection over a horizon.
"""

import calendar
import itertools
import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Iterator, Optional, Sequence

from src.core.common.canonical import hash_canonical_payload
from src.core.common.money import sum_amounts
from src.core.liquidity.models import (
    CashFlow,
    CashPosition,
    CashScenario,
    DailyBalance,
    FlowContribution,
    ForecastComparison,
    ForecastResult,
    ScenarioAdjustments,
)
from src.core.liquidity.scenarios import apply_adjustments, max_pull_forward_days

logger = logging.getLogger(__name__)

_FIXED_PERIOD_DAYS = {"weekly": 7, "biweekly": 14}
_CALENDAR_PERIOD_MONTHS = {"monthly": 1, "quarterly": 3, "annually": 12}


def _add_months(anchor: date, months: int) -> date:
    month_index = anchor.month - 1 + months
    year = anchor.year + month_index // 12
    month = month_index % 12 + 1
    day = min(anchor.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def occurrence_date(anchor: date, pattern: str, index: int) -> date:
    if pattern in _FIXED_PERIOD_DAYS:
        return anchor + timedelta(days=_FIXED_PERIOD_DAYS[pattern] * index)
    if pattern in _CALENDAR_PERIOD_MONTHS:
        return _add_months(anchor, _CALENDAR_PERIOD_MONTHS[pattern] * index)
    raise ValueError(f"Unsupported recurrence pattern: {pattern}")


def _iter_occurrences(flow: CashFlow, horizon_end: date) -> Iterator[tuple[int, date]]:
    recurrence = flow.recurrence
    if recurrence is None:
        return
    last_allowed = min(horizon_end, recurrence.end_date or horizon_end)
    # Without an explicit cap the series is bounded only by last_allowed.
    indices = range(recurrence.occurrences) if recurrence.occurrences else itertools.count()
    for index in indices:
        current = occurrence_date(flow.flow_date, recurrence.pattern, index)
        if current > last_allowed:
            return
        yield index, current


def expand_recurring_flows(
    flows: Iterable[CashFlow], start_date: date, end_date: date
) -> list[CashFlow]:
    """Materialize the flow instances that fall within [start_date, end_date].

    One-off flows pass through when dated inside the window. Recurring templates expand
    from their template date; instances before the window are dropped, and each kept
    instance is re-identified as ``{template_id}_{occurrence_index}``.
    """
    expanded: list[CashFlow] = []
    for flow in flows:
        if not flow.is_recurring:
            if start_date <= flow.flow_date <= end_date:
                expanded.append(flow)
            continue
        for index, current in _iter_occurrences(flow, end_date):
            if current < start_date:
                continue
            expanded.append(
                flow.model_copy(
                    update={
                        "flow_id": f"{flow.flow_id}_{index}",
                        "flow_date": current,
                        "recurrence": None,
                    }
                )
            )
    return expanded


def select_latest_positions(positions: Iterable[CashPosition]) -> list[CashPosition]:
    latest: dict[tuple, CashPosition] = {}
    for position in positions:
        key = (
            position.client_id,
            position.scope_type,
            position.scope_id,
            position.account_id or position.position_id,
            position.currency,
        )
        current = latest.get(key)
        if current is None or position.as_of > current.as_of:
            latest[key] = position
    return list(latest.values())


def _input_hash(
    *,
    positions: Sequence[CashPosition],
    flows: Sequence[CashFlow],
    adjustments: Optional[ScenarioAdjustments],
    horizon_days: int,
    min_cash_threshold: Decimal,
    start_date: date,
) -> str:
    return hash_canonical_payload(
        {
            "positions": [position.model_dump(mode="json") for position in positions],
            "flows": [flow.model_dump(mode="json") for flow in flows],
            "adjustments": adjustments.model_dump(mode="json") if adjustments else None,
            "horizon_days": horizon_days,
            "min_cash_threshold": min_cash_threshold,
            "start_date": start_date,
        }
    )


def place_adjusted_flows(
    originals: Sequence[CashFlow],
    adjusted: Sequence[CashFlow],
    start_date: date,
    end_date: date,
) -> list[CashFlow]:
    """Keep adjusted instances that fall inside [start_date, end_date].

    An instance dated on or after the start that an adjustment pulls before it is due
    immediately and lands on ``start_date``. Instances pushed past the end drop out.
    """
    placed: list[CashFlow] = []
    for original, flow in zip(originals, adjusted):
        if start_date <= flow.flow_date <= end_date:
            placed.append(flow)
        elif flow.flow_date < start_date <= original.flow_date:
            placed.append(flow.model_copy(update={"flow_date": start_date}))
    return placed


def _contributions(flows: Sequence[CashFlow]) -> list[FlowContribution]:
    return [
        FlowContribution(flow_id=flow.flow_id, amount=flow.amount, category=flow.category)
        for flow in flows
    ]


def build_forecast(
    *,
    positions: Sequence[CashPosition],
    flows: Sequence[CashFlow],
    horizon_days: int,
    start_date: date,
    min_cash_threshold: Decimal = Decimal("0"),
    scenario: Optional[CashScenario] = None,
    adjustments: Optional[ScenarioAdjustments] = None,
    currency: Optional[str] = None,
) -> ForecastResult:
    """Project day-by-day balances from ``start_date`` through ``start_date + horizon_days``.

    ``adjustments`` takes precedence over ``scenario.adjustments`` when both are given,
    which is how stress overlays are threaded through without inventing a scenario.
    Adjustments are applied as supplied; bounds are the caller's concern.
    """
    if horizon_days < 0:
        raise ValueError("horizon_days must be non-negative")

    end_date = start_date + timedelta(days=horizon_days)
    effective_adjustments = adjustments
    if effective_adjustments is None and scenario is not None:
        effective_adjustments = scenario.adjustments

    starting_balance = sum_amounts(position.balance for position in positions)
    if effective_adjustments is None:
        adjusted = expand_recurring_flows(flows, start_date, end_date)
    else:
        lookahead = timedelta(days=max_pull_forward_days(effective_adjustments))
        expanded = expand_recurring_flows(flows, start_date, end_date + lookahead)
        adjusted = place_adjusted_flows(
            expanded,
            apply_adjustments(expanded, effective_adjustments),
            start_date,
            end_date,
        )
    logger.debug(
        "Forecast inputs. positions=%s flows=%s instances=%s horizon_days=%s",
        len(positions),
        len(flows),
        len(adjusted),
        horizon_days,
    )

    inflows_by_date: dict[date, list[CashFlow]] = defaultdict(list)
    outflows_by_date: dict[date, list[CashFlow]] = defaultdict(list)
    for flow in adjusted:
        target = inflows_by_date if flow.flow_type == "inflow" else outflows_by_date
        target[flow.flow_date].append(flow)

    daily_balances: list[DailyBalance] = []
    balance = starting_balance
    min_balance = starting_balance
    min_balance_date = start_date
    max_balance = starting_balance
    total_inflows = Decimal("0")
    total_outflows = Decimal("0")
    deficit_dates: list[date] = []

    for offset in range(horizon_days + 1):
        day = start_date + timedelta(days=offset)
        day_inflows = inflows_by_date.get(day, [])
        day_outflows = outflows_by_date.get(day, [])
        inflow_sum = sum_amounts(flow.amount for flow in day_inflows)
        outflow_sum = sum_amounts(flow.amount for flow in day_outflows)
        opening = balance
        closing = opening + inflow_sum - outflow_sum

        daily_balances.append(
            DailyBalance(
                balance_date=day,
                opening_balance=opening,
                inflows=inflow_sum,
                outflows=outflow_sum,
                closing_balance=closing,
                inflow_details=_contributions(day_inflows),
                outflow_details=_contributions(day_outflows),
            )
        )

        balance = closing
        total_inflows += inflow_sum
        total_outflows += outflow_sum
        if closing < min_balance:
            min_balance = closing
            min_balance_date = day
        if closing > max_balance:
            max_balance = closing
        if closing < min_cash_threshold:
            deficit_dates.append(day)

    return ForecastResult(
        start_date=start_date,
        end_date=end_date,
        currency=currency or (positions[0].currency if positions else None),
        scenario_id=scenario.scenario_id if scenario is not None else None,
        starting_balance=starting_balance,
        min_cash_threshold=min_cash_threshold,
        daily_balances=daily_balances,
        min_balance=min_balance,
        min_balance_date=min_balance_date,
        max_balance=max_balance,
        total_inflows=total_inflows,
        total_outflows=total_outflows,
        deficit_days=len(deficit_dates),
        deficit_dates=deficit_dates,
        input_hash=_input_hash(
            positions=positions,
            flows=flows,
            adjustments=effective_adjustments,
            horizon_days=horizon_days,
            min_cash_threshold=min_cash_threshold,
            start_date=start_date,
        ),
    )


def compare_forecast_results(
    base: ForecastResult, comparison: ForecastResult
) -> ForecastComparison:
    min_balance_diff = comparison.min_balance - base.min_balance
    variance_percent = (
        abs(min_balance_diff / base.min_balance) * Decimal("100")
        if base.min_balance != 0
        else Decimal("0")
    )
    return ForecastComparison(
        min_balance_diff=min_balance_diff,
        total_inflows_diff=comparison.total_inflows - base.total_inflows,
        total_outflows_diff=comparison.total_outflows - base.total_outflows,
        deficit_days_diff=comparison.deficit_days - base.deficit_days,
        variance_percent=variance_percent.quantize(Decimal("0.0001")),
    )
