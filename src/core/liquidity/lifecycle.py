from datetime import datetime, timezone
from typing import Optional

from src.core.liquidity.models import AlertStatus, LiquidityAlert

TERMINAL_STATUSES = {"closed"}

TRANSITION_MAP: dict[tuple[AlertStatus, AlertStatus], str] = {
    ("open", "acknowledged"): "acknowledged_at",
    ("open", "closed"): "closed_at",
    ("acknowledged", "closed"): "closed_at",
}


class LiquidityAlertLifecycleError(Exception):
    pass


class LiquidityAlertTransitionError(LiquidityAlertLifecycleError):
    pass


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def transition_alert(
    alert: LiquidityAlert,
    target_status: AlertStatus,
    *,
    actor: Optional[str] = None,
    at: Optional[datetime] = None,
) -> LiquidityAlert:
    stamp_field = TRANSITION_MAP.get((alert.status, target_status))
    if stamp_field is None:
        raise LiquidityAlertTransitionError(
            f"ALERT_TRANSITION_INVALID: {alert.status} -> {target_status}"
        )
    actor_field = "acknowledged_by" if stamp_field == "acknowledged_at" else "closed_by"
    return alert.model_copy(
        update={
            "status": target_status,
            stamp_field: at or _utc_now(),
            actor_field: actor,
        }
    )


def acknowledge_alert(
    alert: LiquidityAlert, *, actor: Optional[str] = None, at: Optional[datetime] = None
) -> LiquidityAlert:
    return transition_alert(alert, "acknowledged", actor=actor, at=at)


def close_alert(
    alert: LiquidityAlert, *, actor: Optional[str] = None, at: Optional[datetime] = None
) -> LiquidityAlert:
    return transition_alert(alert, "closed", actor=actor, at=at)


def is_terminal(alert: LiquidityAlert) -> bool:
    return alert.status in TERMINAL_STATUSES
