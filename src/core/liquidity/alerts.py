"""
FILE: src/core/liquidity/alerts.py
Rule-driven liquidity alert synthesis, deduplication, escalation and prioritization.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from src.core.common.canonical import short_digest
from src.core.liquidity import messages
from src.core.liquidity.models import (
    AlertCondition,
    AlertRule,
    AlertSource,
    ForecastContext,
    ForecastResult,
    LiquidityAlert,
    SuggestedAction,
)

logger = logging.getLogger(__name__)

SEVERITY_ORDER = {"critical": 3, "warning": 2, "info": 1}
SEVERITY_WEIGHTS = {"critical": 1000, "warning": 100, "info": 10}
STATUS_WEIGHTS = {"open": 100, "acknowledged": 10, "closed": 1}

LARGE_SHORTFALL_AMOUNT = Decimal("500000")
ESCALATION_AGE = timedelta(hours=24)

DEFAULT_ALERT_RULES: tuple[AlertRule, ...] = (
    AlertRule(
        rule_id="rule-critical-deficit-30d",
        name="Critical: Deficit within 30 days",
        condition=AlertCondition(type="deficit_proximity", threshold=Decimal("30"), operator="lte"),
        severity="critical",
    ),
    AlertRule(
        rule_id="rule-warning-deficit-90d",
        name="Warning: Deficit within 90 days",
        condition=AlertCondition(type="deficit_proximity", threshold=Decimal("90"), operator="lte"),
        severity="warning",
    ),
    AlertRule(
        rule_id="rule-warning-min-balance",
        name="Warning: Low minimum balance",
        condition=AlertCondition(type="min_balance", threshold=Decimal("100000"), operator="lt"),
        severity="warning",
    ),
    AlertRule(
        rule_id="rule-info-shortfall",
        name="Info: Potential shortfall under stress",
        condition=AlertCondition(type="shortfall_amount", threshold=Decimal("0"), operator="gt"),
        severity="info",
    ),
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def evaluate_condition(value: Decimal | int, operator: str, threshold: Decimal) -> bool:
    if operator == "lt":
        return value < threshold
    if operator == "gt":
        return value > threshold
    if operator == "eq":
        return value == threshold
    if operator == "lte":
        return value <= threshold
    if operator == "gte":
        return value >= threshold
    return False


def compute_shortfall(result: ForecastResult, min_cash_threshold: Decimal) -> Decimal:
    return max(Decimal("0"), min_cash_threshold - result.min_balance)


def days_until(target: date, as_of: date) -> int:
    return (target - as_of).days


def _rule_metric(
    rule: AlertRule,
    *,
    result: ForecastResult,
    shortfall: Decimal,
    days_to_deficit: Optional[int],
) -> Optional[Decimal | int]:
    condition_type = rule.condition.type
    if condition_type == "deficit_proximity":
        return days_to_deficit
    if condition_type == "min_balance":
        return result.min_balance
    if condition_type == "shortfall_amount":
        return shortfall
    return result.deficit_days


def suggested_actions(
    severity: str, shortfall: Decimal, locale: str = "en"
) -> list[SuggestedAction]:
    actions: list[SuggestedAction] = []

    def _add(action: str, priority: str) -> None:
        actions.append(
            SuggestedAction(
                action=action,
                description=messages.action_description(action, locale),
                priority=priority,
            )
        )

    if severity == "critical":
        _add("delay_payment", "high")
        _add("short_term_financing", "high")
    if shortfall > LARGE_SHORTFALL_AMOUNT:
        _add("sell_liquid_assets", "high" if severity == "critical" else "medium")
    _add("contact_counterparties", "medium")
    _add("review_forecast", "low")
    return actions


def alert_id_for(forecast_id: str, deficit_date: date) -> str:
    return f"la_{short_digest(f'{forecast_id}:{deficit_date.isoformat()}')}"


def _build_alert(
    *,
    context: ForecastContext,
    result: ForecastResult,
    rule: AlertRule,
    shortfall: Decimal,
    deficit_date: date,
    days_to_deficit: int,
    currency: str,
    created_at: datetime,
    locale: str,
) -> LiquidityAlert:
    sources = [AlertSource(type="forecast", id=context.forecast_id, description=context.name)]
    if context.scenario_id:
        sources.append(AlertSource(type="scenario", id=context.scenario_id))
    if context.stress_test_id:
        sources.append(AlertSource(type="stress_test", id=context.stress_test_id))
    return LiquidityAlert(
        alert_id=alert_id_for(context.forecast_id, deficit_date),
        client_id=context.client_id,
        forecast_id=context.forecast_id,
        scenario_id=context.scenario_id,
        stress_test_id=context.stress_test_id,
        rule_id=rule.rule_id,
        deficit_date=deficit_date,
        shortfall_amount=shortfall,
        currency=currency,
        severity=rule.severity,
        status="open",
        title=messages.alert_title(
            severity=rule.severity,
            amount=messages.format_currency(shortfall, currency),
            when=messages.format_date(deficit_date, locale),
            locale=locale,
        ),
        description=messages.alert_description(
            days=days_to_deficit,
            min_balance=messages.format_currency(result.min_balance, currency),
            shortfall=messages.format_currency(shortfall, currency),
            deficit_days=result.deficit_days,
            locale=locale,
        ),
        suggested_actions=suggested_actions(rule.severity, shortfall, locale),
        sources=sources,
        created_at=created_at,
    )


def deduplicate_alerts(alerts: Iterable[LiquidityAlert]) -> list[LiquidityAlert]:
    """Keep one alert per deficit date: the most severe, first seen on ties."""
    by_date: dict[date, LiquidityAlert] = {}
    for alert in alerts:
        existing = by_date.get(alert.deficit_date)
        if existing is None or SEVERITY_ORDER[alert.severity] > SEVERITY_ORDER[existing.severity]:
            by_date[alert.deficit_date] = alert
    return list(by_date.values())


def generate_alerts(
    context: ForecastContext,
    result: ForecastResult,
    *,
    min_cash_threshold: Optional[Decimal] = None,
    rules: Sequence[AlertRule] = DEFAULT_ALERT_RULES,
    as_of: Optional[date] = None,
    created_at: Optional[datetime] = None,
    currency: Optional[str] = None,
    locale: str = "en",
) -> list[LiquidityAlert]:
    """Derive deduplicated alerts for one forecast run.

    Alerts exist only when the forecast has a first deficit date; proximity rules are
    skipped entirely without one. Days-to-deficit count from ``as_of``, which defaults
    to the forecast's start date.
    """
    threshold = result.min_cash_threshold if min_cash_threshold is None else min_cash_threshold
    first_deficit = result.first_deficit_date
    if first_deficit is None:
        logger.debug("No deficit in horizon. forecast_id=%s", context.forecast_id)
        return []

    reference_date = as_of or result.start_date
    days_to_deficit = days_until(first_deficit, reference_date)
    shortfall = compute_shortfall(result, threshold)
    resolved_currency = currency or result.currency or "USD"
    stamped_at = created_at or _utc_now()

    candidates: list[LiquidityAlert] = []
    for rule in rules:
        if not rule.enabled:
            continue
        metric = _rule_metric(
            rule, result=result, shortfall=shortfall, days_to_deficit=days_to_deficit
        )
        if metric is None:
            continue
        if not evaluate_condition(metric, rule.condition.operator, rule.condition.threshold):
            continue
        candidates.append(
            _build_alert(
                context=context,
                result=result,
                rule=rule,
                shortfall=shortfall,
                deficit_date=first_deficit,
                days_to_deficit=days_to_deficit,
                currency=resolved_currency,
                created_at=stamped_at,
                locale=locale,
            )
        )

    alerts = deduplicate_alerts(candidates)
    logger.debug(
        "Alerts generated. forecast_id=%s candidates=%s kept=%s",
        context.forecast_id,
        len(candidates),
        len(alerts),
    )
    return alerts


def should_escalate(alert: LiquidityAlert, now: Optional[datetime] = None) -> bool:
    if alert.severity != "critical" or alert.status != "open":
        return False
    return (now or _utc_now()) - alert.created_at > ESCALATION_AGE


def alerts_to_escalate(
    alerts: Iterable[LiquidityAlert], now: Optional[datetime] = None
) -> list[LiquidityAlert]:
    reference = now or _utc_now()
    return [alert for alert in alerts if should_escalate(alert, reference)]


def get_alert_priority(alert: LiquidityAlert, today: Optional[date] = None) -> int:
    """Lower scores sort first: most severe, most open, most imminent."""
    reference = today or _utc_now().date()
    return (
        -SEVERITY_WEIGHTS[alert.severity]
        - STATUS_WEIGHTS[alert.status]
        + days_until(alert.deficit_date, reference)
    )


def sort_alerts_by_priority(
    alerts: Iterable[LiquidityAlert], today: Optional[date] = None
) -> list[LiquidityAlert]:
    reference = today or _utc_now().date()

    def _sort_key(alert: LiquidityAlert) -> tuple[int, date, str]:
        return get_alert_priority(alert, reference), alert.deficit_date, alert.alert_id

    return sorted(alerts, key=_sort_key)
