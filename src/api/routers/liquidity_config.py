import os
from decimal import Decimal, InvalidOperation

from fastapi import HTTPException, status

from src.core.liquidity.messages import resolve_locale

DEFAULT_MAX_HORIZON_DAYS = 1825
DEFAULT_HORIZON_DAYS = 90


def env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def env_decimal(name: str, default: Decimal) -> Decimal:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return Decimal(value.strip())
    except InvalidOperation:
        return default


def max_horizon_days() -> int:
    return env_int("LIQUIDITY_MAX_HORIZON_DAYS", DEFAULT_MAX_HORIZON_DAYS)


def default_horizon_days() -> int:
    return min(env_int("LIQUIDITY_DEFAULT_HORIZON_DAYS", DEFAULT_HORIZON_DAYS), max_horizon_days())


def default_min_cash_threshold() -> Decimal:
    return env_decimal("LIQUIDITY_DEFAULT_MIN_CASH_THRESHOLD", Decimal("0"))


def default_locale() -> str:
    return resolve_locale(os.getenv("LIQUIDITY_DEFAULT_LOCALE"))


def assert_stress_tests_enabled() -> None:
    if not env_flag("LIQUIDITY_STRESS_TESTS_ENABLED", True):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="LIQUIDITY_STRESS_TESTS_DISABLED",
        )
