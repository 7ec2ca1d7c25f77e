"""
FILE: src/core/liquidity/models.py
Value contracts shared by the importer, scenario, forecast, stress and alert engines.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union

from pydantic import AwareDatetime, BaseModel, Field, model_validator

ScopeType = Literal["household", "entity", "portfolio", "account"]
FlowType = Literal["inflow", "outflow"]
FlowCategory = Literal[
    "capital_call",
    "distribution",
    "invoice",
    "tax",
    "debt",
    "payroll",
    "rent",
    "dividend",
    "interest",
    "fee",
    "other",
]
RecurrencePattern = Literal["once", "weekly", "biweekly", "monthly", "quarterly", "annually"]
SourceKind = Literal["invoice", "capital_call", "distribution", "tax_deadline"]
ScenarioType = Literal["base", "conservative", "aggressive", "custom"]
RuleOperator = Literal["eq", "neq", "lt", "lte", "gt", "gte"]
CustomRuleField = Literal[
    "flow_type", "category", "amount", "currency", "source_type", "is_confirmed"
]
CustomRuleAction = Literal["multiply", "add", "delay"]
StressArchetype = Literal[
    "market_drawdown",
    "delayed_distributions",
    "tax_spike",
    "debt_rate_shock",
    "capital_call_acceleration",
]
StressSeverity = Literal["mild", "moderate", "severe"]
AlertSeverity = Literal["critical", "warning", "info"]
AlertStatus = Literal["open", "acknowledged", "closed"]
AlertConditionType = Literal["deficit_proximity", "min_balance", "shortfall_amount", "deficit_days"]
AlertOperator = Literal["lt", "gt", "eq", "lte", "gte"]
ActionPriority = Literal["high", "medium", "low"]
Locale = Literal["en", "ru", "uk"]


class CashPosition(BaseModel):
    model_config = {"frozen": True}

    position_id: str = Field(description="Position record identifier.", examples=["pos_001"])
    client_id: str = Field(description="Owning client identifier.", examples=["cl_001"])
    scope_type: ScopeType = Field(default="account", description="Scope the balance belongs to.")
    scope_id: Optional[str] = Field(default=None, description="Scope identifier.")
    account_id: Optional[str] = Field(default=None, description="Bank or custody account.")
    balance: Decimal = Field(description="Balance at as_of.", examples=["1000000.00"])
    currency: str = Field(description="ISO currency code.", examples=["USD"])
    as_of: AwareDatetime = Field(description="Point in time the balance was observed.")
    source: Literal["bank_sync", "custodian_sync", "manual"] = Field(
        default="manual", description="How the position was recorded."
    )


class Recurrence(BaseModel):
    model_config = {"frozen": True}

    pattern: RecurrencePattern = Field(description="Recurrence pattern.", examples=["monthly"])
    end_date: Optional[date] = Field(
        default=None, description="Last date on which an occurrence may fall."
    )
    occurrences: Optional[int] = Field(
        default=None, ge=1, description="Maximum number of occurrences, counted from the template."
    )


class CashFlow(BaseModel):
    model_config = {"frozen": True}

    flow_id: str = Field(description="Flow identifier.", examples=["inv-17"])
    client_id: str = Field(description="Owning client identifier.", examples=["cl_001"])
    scope_type: ScopeType = Field(default="household")
    scope_id: Optional[str] = Field(default=None)
    flow_type: FlowType = Field(description="Direction of the cash movement.")
    category: FlowCategory = Field(description="Cash-flow category.")
    flow_date: date = Field(description="Expected value date (template date if recurring).")
    amount: Decimal = Field(ge=0, description="Unsigned amount; direction comes from flow_type.")
    currency: str = Field(description="ISO currency code.", examples=["USD"])
    description: Optional[str] = Field(default=None)
    recurrence: Optional[Recurrence] = Field(
        default=None, description="Recurrence descriptor; absent means one-off."
    )
    is_confirmed: bool = Field(default=False, description="Informational confirmation flag.")
    source_type: str = Field(default="manual", description="Provenance source type.")
    source_id: Optional[str] = Field(default=None, description="Provenance source identifier.")

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None and self.recurrence.pattern != "once"

    @property
    def source_ref(self) -> str:
        return f"{self.source_type}:{self.source_id or self.flow_id}"


class InvoiceRecord(BaseModel):
    source_kind: Literal["invoice"] = "invoice"
    id: str
    client_id: str
    type: Literal["payable", "receivable"]
    amount: Decimal = Field(ge=0)
    currency: str
    due_date: date
    status: str
    description: Optional[str] = None


class CapitalCallRecord(BaseModel):
    source_kind: Literal["capital_call"] = "capital_call"
    id: str
    client_id: str
    fund_name: str
    amount: Decimal = Field(ge=0)
    currency: str
    due_date: date
    status: str


class DistributionRecord(BaseModel):
    source_kind: Literal["distribution"] = "distribution"
    id: str
    client_id: str
    fund_name: str
    amount: Decimal = Field(ge=0)
    currency: str
    expected_date: date
    status: str


class TaxDeadlineRecord(BaseModel):
    source_kind: Literal["tax_deadline"] = "tax_deadline"
    id: str
    client_id: str
    tax_type: str
    amount: Decimal = Field(ge=0)
    currency: str
    due_date: date
    status: str


SourceRecord = Annotated[
    Union[InvoiceRecord, CapitalCallRecord, DistributionRecord, TaxDeadlineRecord],
    Field(discriminator="source_kind"),
]


class ImportResult(BaseModel):
    imported: int = Field(default=0, description="Number of flows produced.")
    skipped: int = Field(default=0, description="Records skipped by client or status filters.")
    errors: List[str] = Field(default_factory=list, description="Per-record failures.")
    flows: List[CashFlow] = Field(default_factory=list)


class CustomRule(BaseModel):
    field: CustomRuleField = Field(description="Flow field the rule matches on.")
    operator: RuleOperator = Field(description="Comparison operator.")
    value: Union[bool, Decimal, str] = Field(description="Comparison operand.")
    action: CustomRuleAction = Field(description="Adjustment applied to matching flows.")
    action_value: Decimal = Field(
        description="Multiplier, additive amount, or delay in days depending on action."
    )


class ScenarioAdjustments(BaseModel):
    """Absent (None) scalar fields mean "no adjustment" and are not carried by merges."""

    inflow_haircut_pct: Optional[Decimal] = Field(
        default=None, description="Percent reduction applied to every inflow.", examples=["15"]
    )
    outflow_increase_pct: Optional[Decimal] = Field(
        default=None, description="Percent increase applied to every outflow.", examples=["10"]
    )
    distribution_delay_days: Optional[int] = Field(
        default=None, description="Days distribution inflows are pushed later.", examples=[30]
    )
    capital_call_shift_days: Optional[int] = Field(
        default=None, description="Days capital-call outflows are pulled earlier.", examples=[14]
    )
    rate_shock_bps: Optional[int] = Field(
        default=None, description="Basis points added to debt outflows.", examples=[50]
    )
    custom_rules: List[CustomRule] = Field(default_factory=list)


class CashScenario(BaseModel):
    scenario_id: str = Field(description="Scenario identifier.", examples=["scn_conservative"])
    name: str = Field(description="Display name.", examples=["Conservative"])
    scenario_type: ScenarioType = Field(default="custom")
    is_default: bool = Field(default=False)
    client_id: Optional[str] = Field(default=None, description="Owner; None for presets.")
    adjustments: ScenarioAdjustments = Field(default_factory=ScenarioAdjustments)


class ScenarioValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


class FlowContribution(BaseModel):
    flow_id: str
    amount: Decimal
    category: FlowCategory


class DailyBalance(BaseModel):
    balance_date: date
    opening_balance: Decimal
    inflows: Decimal
    outflows: Decimal
    closing_balance: Decimal
    inflow_details: List[FlowContribution] = Field(default_factory=list)
    outflow_details: List[FlowContribution] = Field(default_factory=list)


class ForecastResult(BaseModel):
    start_date: date
    end_date: date
    currency: Optional[str] = None
    scenario_id: Optional[str] = None
    starting_balance: Decimal
    min_cash_threshold: Decimal
    daily_balances: List[DailyBalance]
    min_balance: Decimal
    min_balance_date: date
    max_balance: Decimal
    total_inflows: Decimal
    total_outflows: Decimal
    deficit_days: int
    deficit_dates: List[date] = Field(default_factory=list)
    input_hash: str

    @property
    def first_deficit_date(self) -> Optional[date]:
        return self.deficit_dates[0] if self.deficit_dates else None


class ForecastComparison(BaseModel):
    min_balance_diff: Decimal
    total_inflows_diff: Decimal
    total_outflows_diff: Decimal
    deficit_days_diff: int
    variance_percent: Decimal


class StressParams(BaseModel):
    severity: StressSeverity = Field(default="moderate")
    drawdown_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)
    delay_days: Optional[int] = Field(default=None, ge=0, le=365)
    tax_increase_percent: Optional[Decimal] = Field(default=None, ge=0, le=500)
    rate_shock_bps: Optional[int] = Field(default=None, ge=0, le=1000)
    acceleration_days: Optional[int] = Field(default=None, ge=0, le=180)


class StressComparison(BaseModel):
    min_balance_delta: Decimal
    deficit_days_delta: int
    variance_percent: Decimal


class StressResult(BaseModel):
    min_cash_reached: Decimal
    min_cash_date: date
    breaches_count: int
    breach_dates: List[date] = Field(default_factory=list)
    total_shortfall: Decimal
    recovery_date: Optional[date] = None
    impact_summary: str
    comparison: StressComparison
    alerts_generated: int = Field(description="1 when any breach day exists, else 0.")
    applied_adjustments: ScenarioAdjustments
    daily_balances: List[DailyBalance] = Field(default_factory=list)


class CashStressTest(BaseModel):
    stress_test_id: str
    client_id: str
    forecast_id: Optional[str] = None
    name: str
    stress_type: StressArchetype
    params: StressParams = Field(default_factory=StressParams)
    result: Optional[StressResult] = None
    run_at: Optional[AwareDatetime] = None


class AlertCondition(BaseModel):
    type: AlertConditionType
    threshold: Decimal
    operator: AlertOperator


class AlertRule(BaseModel):
    model_config = {"frozen": True}

    rule_id: str
    name: str
    condition: AlertCondition
    severity: AlertSeverity
    enabled: bool = True


class SuggestedAction(BaseModel):
    action: str
    description: str
    priority: ActionPriority


class AlertSource(BaseModel):
    type: str
    id: str
    description: Optional[str] = None


class ForecastContext(BaseModel):
    """Identity of the forecast an alert set is generated for."""

    forecast_id: str
    client_id: str
    name: str = ""
    scenario_id: Optional[str] = None
    stress_test_id: Optional[str] = None


class LiquidityAlert(BaseModel):
    alert_id: str
    client_id: str
    forecast_id: str
    scenario_id: Optional[str] = None
    stress_test_id: Optional[str] = None
    rule_id: Optional[str] = None
    deficit_date: date
    shortfall_amount: Decimal
    currency: str
    severity: AlertSeverity
    status: AlertStatus = "open"
    title: str
    description: str
    suggested_actions: List[SuggestedAction] = Field(default_factory=list)
    sources: List[AlertSource] = Field(default_factory=list)
    created_at: AwareDatetime
    acknowledged_at: Optional[AwareDatetime] = None
    acknowledged_by: Optional[str] = None
    closed_at: Optional[AwareDatetime] = None
    closed_by: Optional[str] = None

    @model_validator(mode="after")
    def validate_lifecycle_stamps(self) -> "LiquidityAlert":
        if self.status == "open" and self.closed_at is not None:
            raise ValueError("open alerts cannot carry closed_at")
        return self
