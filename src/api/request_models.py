from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import AwareDatetime, BaseModel, Field

from src.core.liquidity.models import (
    AlertRule,
    AlertStatus,
    CashFlow,
    CashPosition,
    CashScenario,
    CashStressTest,
    ForecastContext,
    ForecastResult,
    LiquidityAlert,
    Locale,
    ScenarioAdjustments,
    ScopeType,
    SourceKind,
)


class ImportRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "client_id": "cl_001",
                "scope_type": "household",
                "sources": {
                    "invoice": [
                        {
                            "id": "17",
                            "client_id": "cl_001",
                            "type": "payable",
                            "amount": "25000",
                            "currency": "USD",
                            "due_date": "2026-11-15",
                            "status": "approved",
                        }
                    ]
                },
            }
        }
    }

    client_id: str = Field(description="Client the imported flows belong to.")
    scope_type: ScopeType = Field(default="household")
    scope_id: Optional[str] = Field(default=None)
    sources: Dict[SourceKind, List[Dict[str, Any]]] = Field(
        default_factory=dict,
        description="Raw source payloads keyed by source kind.",
    )


class ForecastInputs(BaseModel):
    positions: List[CashPosition] = Field(default_factory=list)
    flows: List[CashFlow] = Field(default_factory=list)
    scenario: Optional[CashScenario] = Field(default=None)
    horizon_days: Optional[int] = Field(
        default=None, ge=0, description="Defaults to LIQUIDITY_DEFAULT_HORIZON_DAYS."
    )
    min_cash_threshold: Optional[Decimal] = Field(
        default=None, description="Defaults to LIQUIDITY_DEFAULT_MIN_CASH_THRESHOLD."
    )
    start_date: Optional[date] = Field(default=None, description="Defaults to today (UTC).")
    currency: Optional[str] = Field(default=None)
    use_latest_positions: bool = Field(
        default=False,
        description="Keep only the latest position per account before summing balances.",
    )


class ForecastRequest(ForecastInputs):
    model_config = {
        "json_schema_extra": {
            "example": {
                "positions": [
                    {
                        "position_id": "pos_1",
                        "client_id": "cl_001",
                        "balance": "1000000",
                        "currency": "USD",
                        "as_of": "2026-10-01T00:00:00Z",
                    }
                ],
                "flows": [
                    {
                        "flow_id": "cc-9",
                        "client_id": "cl_001",
                        "flow_type": "outflow",
                        "category": "capital_call",
                        "flow_date": "2026-10-11",
                        "amount": "1200000",
                        "currency": "USD",
                    }
                ],
                "horizon_days": 30,
                "min_cash_threshold": "0",
                "start_date": "2026-10-01",
            }
        }
    }


class CompareForecastsRequest(BaseModel):
    base: ForecastResult
    comparison: ForecastResult


class ScenarioSummaryRequest(BaseModel):
    adjustments: ScenarioAdjustments
    locale: Optional[Locale] = None


class ScenarioSummaryResponse(BaseModel):
    summary: str


class StressTestRequest(ForecastInputs):
    stress_test: CashStressTest
    baseline: Optional[ForecastResult] = Field(
        default=None,
        description="Baseline to diff against; forecast from the same inputs when omitted.",
    )
    locale: Optional[Locale] = None


class GenerateAlertsRequest(BaseModel):
    context: ForecastContext
    result: ForecastResult
    rules: Optional[List[AlertRule]] = Field(
        default=None, description="Explicit rule set; the default rules apply when omitted."
    )
    as_of: Optional[date] = None
    locale: Optional[Locale] = None


class AlertTransitionRequest(BaseModel):
    alert: LiquidityAlert
    target_status: AlertStatus
    actor: Optional[str] = None


class EscalationRequest(BaseModel):
    alerts: List[LiquidityAlert]
    now: Optional[AwareDatetime] = None


class EscalationResponse(BaseModel):
    escalate_alert_ids: List[str]
