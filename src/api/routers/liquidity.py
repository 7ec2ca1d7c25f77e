from typing import Annotated, List, Optional

from fastapi import APIRouter, Header, status

from src.api.request_models import (
    AlertTransitionRequest,
    CompareForecastsRequest,
    EscalationRequest,
    EscalationResponse,
    ForecastRequest,
    GenerateAlertsRequest,
    ImportRequest,
    ScenarioSummaryRequest,
    ScenarioSummaryResponse,
    StressTestRequest,
)
from src.api.routers.liquidity_config import default_locale
from src.api.services import liquidity_service as service
from src.core.liquidity.forecast import compare_forecast_results
from src.core.liquidity.models import (
    CashScenario,
    CashStressTest,
    ForecastComparison,
    ForecastResult,
    ImportResult,
    LiquidityAlert,
    ScenarioAdjustments,
    ScenarioValidationResult,
)
from src.core.liquidity.scenarios import list_presets, summarize_adjustments, validate_adjustments

router = APIRouter(prefix="/liquidity", tags=["Liquidity"])

CorrelationIdHeader = Annotated[
    Optional[str],
    Header(
        alias="X-Correlation-Id",
        description="Optional trace/correlation identifier propagated to logs.",
        examples=["corr-1234-abcd"],
    ),
]


@router.post(
    "/imports",
    response_model=ImportResult,
    status_code=status.HTTP_200_OK,
    summary="Import Cash Flows From Source Records",
    description=(
        "Projects raw invoices, capital calls, distributions and tax deadlines onto "
        "canonical cash flows. Per-record failures are reported in `errors` and never "
        "abort the batch."
    ),
)
def import_cash_flows(
    request: ImportRequest, correlation_id: CorrelationIdHeader = None
) -> ImportResult:
    return service.import_flows(request=request, correlation_id=correlation_id)


@router.get(
    "/scenarios/presets",
    response_model=List[CashScenario],
    summary="List Scenario Presets",
)
def get_scenario_presets() -> List[CashScenario]:
    return list_presets()


@router.post(
    "/scenarios/validate",
    response_model=ScenarioValidationResult,
    summary="Validate Scenario Adjustments",
    description="Bounds violations are returned in the body; this endpoint never rejects.",
)
def validate_scenario_adjustments(adjustments: ScenarioAdjustments) -> ScenarioValidationResult:
    return validate_adjustments(adjustments)


@router.post(
    "/scenarios/summary",
    response_model=ScenarioSummaryResponse,
    summary="Summarize Scenario Adjustments",
)
def summarize_scenario(request: ScenarioSummaryRequest) -> ScenarioSummaryResponse:
    locale = request.locale or default_locale()
    return ScenarioSummaryResponse(summary=summarize_adjustments(request.adjustments, locale))


@router.post(
    "/forecasts",
    response_model=ForecastResult,
    summary="Build a Cash Forecast",
    description=(
        "Projects a daily balance timeline from positions and flows under an optional "
        "scenario. Scenarios outside validation bounds are rejected with 422."
    ),
)
def create_forecast(
    request: ForecastRequest, correlation_id: CorrelationIdHeader = None
) -> ForecastResult:
    return service.run_forecast(request=request, correlation_id=correlation_id)


@router.post(
    "/forecasts/compare",
    response_model=ForecastComparison,
    summary="Compare Two Forecast Results",
)
def compare_forecasts(request: CompareForecastsRequest) -> ForecastComparison:
    return compare_forecast_results(request.base, request.comparison)


@router.post(
    "/stress-tests",
    response_model=CashStressTest,
    summary="Run a Stress Test",
    description="Returns the stress test with its result payload populated.",
)
def create_stress_test(
    request: StressTestRequest, correlation_id: CorrelationIdHeader = None
) -> CashStressTest:
    return service.run_stress(request=request, correlation_id=correlation_id)


@router.post(
    "/alerts/generate",
    response_model=List[LiquidityAlert],
    summary="Generate Liquidity Alerts",
    description="At most one alert per deficit date, ordered most urgent first.",
)
def generate_liquidity_alerts(
    request: GenerateAlertsRequest, correlation_id: CorrelationIdHeader = None
) -> List[LiquidityAlert]:
    return service.generate_forecast_alerts(request=request, correlation_id=correlation_id)


@router.post(
    "/alerts/transition",
    response_model=LiquidityAlert,
    summary="Transition a Liquidity Alert",
    responses={409: {"description": "Transition not allowed from the current status."}},
)
def transition_liquidity_alert(
    request: AlertTransitionRequest, correlation_id: CorrelationIdHeader = None
) -> LiquidityAlert:
    return service.transition(request=request, correlation_id=correlation_id)


@router.post(
    "/alerts/escalation",
    response_model=EscalationResponse,
    summary="Evaluate Alert Escalation",
)
def evaluate_alert_escalation(request: EscalationRequest) -> EscalationResponse:
    return service.evaluate_escalation(request=request)
