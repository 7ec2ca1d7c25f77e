from decimal import Decimal

import pytest
from fastapi import HTTPException

from src.api.routers.liquidity_config import (
    assert_stress_tests_enabled,
    default_horizon_days,
    default_locale,
    default_min_cash_threshold,
    max_horizon_days,
)


def test_defaults_when_environment_is_unset():
    assert max_horizon_days() == 1825
    assert default_horizon_days() == 90
    assert default_min_cash_threshold() == Decimal("0")
    assert default_locale() == "en"
    assert_stress_tests_enabled()


def test_default_horizon_is_capped_by_maximum(monkeypatch):
    monkeypatch.setenv("LIQUIDITY_DEFAULT_HORIZON_DAYS", "400")
    monkeypatch.setenv("LIQUIDITY_MAX_HORIZON_DAYS", "365")

    assert default_horizon_days() == 365


def test_invalid_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("LIQUIDITY_MAX_HORIZON_DAYS", "-5")
    monkeypatch.setenv("LIQUIDITY_DEFAULT_HORIZON_DAYS", "ninety")
    monkeypatch.setenv("LIQUIDITY_DEFAULT_MIN_CASH_THRESHOLD", "lots")
    monkeypatch.setenv("LIQUIDITY_DEFAULT_LOCALE", "fr")

    assert max_horizon_days() == 1825
    assert default_horizon_days() == 90
    assert default_min_cash_threshold() == Decimal("0")
    assert default_locale() == "en"


def test_threshold_and_locale_overrides(monkeypatch):
    monkeypatch.setenv("LIQUIDITY_DEFAULT_MIN_CASH_THRESHOLD", "250000")
    monkeypatch.setenv("LIQUIDITY_DEFAULT_LOCALE", "UK")

    assert default_min_cash_threshold() == Decimal("250000")
    assert default_locale() == "uk"


def test_stress_tests_disabled_raises_not_found(monkeypatch):
    monkeypatch.setenv("LIQUIDITY_STRESS_TESTS_ENABLED", "false")

    with pytest.raises(HTTPException) as exc_info:
        assert_stress_tests_enabled()

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "LIQUIDITY_STRESS_TESTS_DISABLED"
