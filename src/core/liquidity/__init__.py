from src.core.liquidity.alerts import (
    DEFAULT_ALERT_RULES,
    deduplicate_alerts,
    generate_alerts,
    get_alert_priority,
    should_escalate,
    sort_alerts_by_priority,
)
from src.core.liquidity.forecast import (
    build_forecast,
    compare_forecast_results,
    expand_recurring_flows,
    select_latest_positions,
)
from src.core.liquidity.importer import (
    import_all_sources,
    import_raw_records,
    import_source_records,
)
from src.core.liquidity.lifecycle import (
    LiquidityAlertLifecycleError,
    LiquidityAlertTransitionError,
    acknowledge_alert,
    close_alert,
    transition_alert,
)
from src.core.liquidity.scenarios import (
    SCENARIO_PRESETS,
    apply_scenario,
    get_preset,
    merge_adjustments,
    summarize_adjustments,
    validate_adjustments,
)
from src.core.liquidity.stress import build_stress_adjustments, run_stress_test

__all__ = [
    "DEFAULT_ALERT_RULES",
    "SCENARIO_PRESETS",
    "LiquidityAlertLifecycleError",
    "LiquidityAlertTransitionError",
    "acknowledge_alert",
    "apply_scenario",
    "build_forecast",
    "build_stress_adjustments",
    "close_alert",
    "compare_forecast_results",
    "deduplicate_alerts",
    "expand_recurring_flows",
    "generate_alerts",
    "get_alert_priority",
    "get_preset",
    "import_all_sources",
    "import_raw_records",
    "import_source_records",
    "merge_adjustments",
    "run_stress_test",
    "select_latest_positions",
    "should_escalate",
    "sort_alerts_by_priority",
    "summarize_adjustments",
    "transition_alert",
    "validate_adjustments",
]
