import logging
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import HTTPException, status

from src.api.observability import (
    ALERTS_GENERATED_TOTAL,
    FORECASTS_TOTAL,
    STRESS_TESTS_TOTAL,
    breach_outcome,
)
from src.api.request_models import (
    AlertTransitionRequest,
    EscalationRequest,
    EscalationResponse,
    ForecastInputs,
    ForecastRequest,
    GenerateAlertsRequest,
    ImportRequest,
    StressTestRequest,
)
from src.api.routers.liquidity_config import (
    assert_stress_tests_enabled,
    default_horizon_days,
    default_locale,
    default_min_cash_threshold,
    max_horizon_days,
)
from src.core.liquidity.alerts import (
    DEFAULT_ALERT_RULES,
    alerts_to_escalate,
    generate_alerts,
    sort_alerts_by_priority,
)
from src.core.liquidity.forecast import build_forecast, select_latest_positions
from src.core.liquidity.importer import import_raw_records, merge_import_results
from src.core.liquidity.lifecycle import LiquidityAlertTransitionError, transition_alert
from src.core.liquidity.models import (
    CashStressTest,
    ForecastResult,
    ImportResult,
    LiquidityAlert,
)
from src.core.liquidity.scenarios import validate_scenario
from src.core.liquidity.stress import run_stress_test

logger = logging.getLogger(__name__)

HTTP_422 = getattr(
    status,
    "HTTP_422_UNPROCESSABLE_CONTENT",
    status.HTTP_422_UNPROCESSABLE_ENTITY,
)


def _resolve_correlation_id(correlation_id: Optional[str]) -> str:
    return correlation_id or f"corr_{uuid.uuid4().hex[:12]}"


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _resolve_forecast_kwargs(inputs: ForecastInputs) -> dict:
    horizon_days = (
        inputs.horizon_days if inputs.horizon_days is not None else default_horizon_days()
    )
    limit = max_horizon_days()
    if horizon_days > limit:
        raise HTTPException(
            status_code=HTTP_422,
            detail=f"HORIZON_TOO_LONG: horizon_days must be <= {limit}",
        )
    if inputs.scenario is not None:
        validation = validate_scenario(inputs.scenario)
        if not validation.valid:
            raise HTTPException(
                status_code=HTTP_422,
                detail=f"INVALID_SCENARIO: {'; '.join(validation.errors)}",
            )
    positions = (
        select_latest_positions(inputs.positions)
        if inputs.use_latest_positions
        else list(inputs.positions)
    )
    return {
        "positions": positions,
        "flows": list(inputs.flows),
        "horizon_days": horizon_days,
        "start_date": inputs.start_date or _today(),
        "min_cash_threshold": (
            inputs.min_cash_threshold
            if inputs.min_cash_threshold is not None
            else default_min_cash_threshold()
        ),
        "scenario": inputs.scenario,
    }


def import_flows(*, request: ImportRequest, correlation_id: Optional[str]) -> ImportResult:
    resolved_correlation_id = _resolve_correlation_id(correlation_id)
    results = [
        import_raw_records(
            source_kind,
            payloads,
            request.client_id,
            request.scope_type,
            request.scope_id,
        )
        for source_kind, payloads in sorted(request.sources.items())
    ]
    result = merge_import_results(results)
    logger.info(
        "Imported cash flows. CID=%s client_id=%s imported=%s skipped=%s errors=%s",
        resolved_correlation_id,
        request.client_id,
        result.imported,
        result.skipped,
        len(result.errors),
    )
    if result.errors:
        logger.warning(
            "Import reported record errors. CID=%s errors=%s",
            resolved_correlation_id,
            result.errors,
        )
    return result


def run_forecast(*, request: ForecastRequest, correlation_id: Optional[str]) -> ForecastResult:
    resolved_correlation_id = _resolve_correlation_id(correlation_id)
    kwargs = _resolve_forecast_kwargs(request)
    result = build_forecast(**kwargs, currency=request.currency)
    FORECASTS_TOTAL.labels(outcome=breach_outcome(result.deficit_days)).inc()
    logger.info(
        "Forecast built. CID=%s horizon_days=%s flows=%s input_hash=%s",
        resolved_correlation_id,
        kwargs["horizon_days"],
        len(kwargs["flows"]),
        result.input_hash,
    )
    if result.deficit_days:
        logger.warning(
            "Forecast has deficit days. CID=%s deficit_days=%s first_deficit=%s",
            resolved_correlation_id,
            result.deficit_days,
            result.first_deficit_date,
        )
    return result


def run_stress(*, request: StressTestRequest, correlation_id: Optional[str]) -> CashStressTest:
    assert_stress_tests_enabled()
    resolved_correlation_id = _resolve_correlation_id(correlation_id)
    kwargs = _resolve_forecast_kwargs(request)
    locale = request.locale or default_locale()
    scenario = kwargs.pop("scenario")
    completed = run_stress_test(
        request.stress_test,
        base_scenario=scenario,
        baseline=request.baseline,
        run_at=datetime.now(timezone.utc),
        locale=locale,
        **kwargs,
    )
    breaches = completed.result.breaches_count if completed.result else 0
    STRESS_TESTS_TOTAL.labels(
        stress_type=completed.stress_type, outcome=breach_outcome(breaches)
    ).inc()
    logger.info(
        "Stress test completed. CID=%s stress_test_id=%s type=%s breaches=%s",
        resolved_correlation_id,
        completed.stress_test_id,
        completed.stress_type,
        breaches,
    )
    return completed


def generate_forecast_alerts(
    *, request: GenerateAlertsRequest, correlation_id: Optional[str]
) -> list[LiquidityAlert]:
    resolved_correlation_id = _resolve_correlation_id(correlation_id)
    rules = request.rules if request.rules is not None else DEFAULT_ALERT_RULES
    alerts = generate_alerts(
        request.context,
        request.result,
        rules=rules,
        as_of=request.as_of,
        locale=request.locale or default_locale(),
    )
    for alert in alerts:
        ALERTS_GENERATED_TOTAL.labels(severity=alert.severity).inc()
    logger.info(
        "Liquidity alerts generated. CID=%s forecast_id=%s alerts=%s",
        resolved_correlation_id,
        request.context.forecast_id,
        len(alerts),
    )
    return sort_alerts_by_priority(alerts, request.as_of or request.result.start_date)


def transition(
    *, request: AlertTransitionRequest, correlation_id: Optional[str]
) -> LiquidityAlert:
    resolved_correlation_id = _resolve_correlation_id(correlation_id)
    try:
        updated = transition_alert(request.alert, request.target_status, actor=request.actor)
    except LiquidityAlertTransitionError as exc:
        logger.warning(
            "Rejected alert transition. CID=%s alert_id=%s detail=%s",
            resolved_correlation_id,
            request.alert.alert_id,
            exc,
        )
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    logger.info(
        "Alert transitioned. CID=%s alert_id=%s status=%s",
        resolved_correlation_id,
        updated.alert_id,
        updated.status,
    )
    return updated


def evaluate_escalation(*, request: EscalationRequest) -> EscalationResponse:
    escalated = alerts_to_escalate(request.alerts, request.now)
    return EscalationResponse(escalate_alert_ids=[alert.alert_id for alert in escalated])
