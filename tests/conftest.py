"""
FILE: tests/conftest.py
Shared fixtures for liquidity engine tests.
"""

from datetime import date
from pathlib import Path

import pytest

from src.core.liquidity.models import CashPosition
from tests.factories import position


def _has_marker(item: pytest.Item, name: str) -> bool:
    return item.get_closest_marker(name) is not None


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if _has_marker(item, "unit") or _has_marker(item, "integration"):
            continue

        path = Path(str(item.fspath)).as_posix().lower()
        if "/tests/integration/" in path or "_integration.py" in path:
            item.add_marker(pytest.mark.integration)
            continue
        item.add_marker(pytest.mark.unit)


@pytest.fixture
def start_date() -> date:
    return date(2026, 1, 1)


@pytest.fixture
def million_position() -> CashPosition:
    return position("pos_main", "1000000")


@pytest.fixture(autouse=True)
def liquidity_env_defaults(monkeypatch: pytest.MonkeyPatch):
    """Pin configuration so tests never depend on the developer's shell."""

    for name in (
        "LIQUIDITY_MAX_HORIZON_DAYS",
        "LIQUIDITY_DEFAULT_HORIZON_DAYS",
        "LIQUIDITY_DEFAULT_MIN_CASH_THRESHOLD",
        "LIQUIDITY_DEFAULT_LOCALE",
        "LIQUIDITY_STRESS_TESTS_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
