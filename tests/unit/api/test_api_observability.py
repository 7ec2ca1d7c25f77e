import json
import logging
import re

from fastapi.testclient import TestClient

from src.api.main import app
from src.api.observability import JsonFormatter, breach_outcome, client_id_var


def test_observability_headers_preserve_inbound_correlation_and_trace_id():
    with TestClient(app) as client:
        response = client.get(
            "/health",
            headers={
                "X-Correlation-Id": "corr-inbound-123",
                "X-Request-Id": "req-inbound-123",
                "traceparent": "00-1234567890abcdef1234567890abcdef-0000000000000001-01",
            },
        )

    assert response.status_code == 200
    assert response.headers["X-Correlation-Id"] == "corr-inbound-123"
    assert response.headers["X-Request-Id"] == "req-inbound-123"
    assert response.headers["X-Trace-Id"] == "1234567890abcdef1234567890abcdef"


def test_observability_headers_generate_ids_when_missing():
    with TestClient(app) as client:
        response = client.get("/health")

    assert re.fullmatch(r"corr_[0-9a-f]{12}", response.headers["X-Correlation-Id"])
    assert re.fullmatch(r"req_[0-9a-f]{12}", response.headers["X-Request-Id"])
    assert re.fullmatch(r"[0-9a-f]{32}", response.headers["X-Trace-Id"])


def test_json_formatter_includes_context_and_extra_fields():
    token = client_id_var.set("cl_001")
    try:
        record = logging.LogRecord(
            name="src.core.liquidity.forecast",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg="Forecast has deficit days. deficit_days=%s",
            args=(21,),
            exc_info=None,
        )
        record.extra_fields = {"forecast_id": "fc_001"}
        payload = json.loads(JsonFormatter().format(record))
    finally:
        client_id_var.reset(token)

    assert payload["level"] == "WARNING"
    assert payload["message"] == "Forecast has deficit days. deficit_days=21"
    assert payload["client_id"] == "cl_001"
    assert payload["forecast_id"] == "fc_001"
    assert "correlation_id" not in payload


def test_metrics_expose_liquidity_forecast_counter():
    payload = {
        "positions": [
            {
                "position_id": "pos_1",
                "client_id": "cl_001",
                "balance": "100000",
                "currency": "USD",
                "as_of": "2026-01-01T00:00:00Z",
            }
        ],
        "flows": [],
        "horizon_days": 5,
        "start_date": "2026-01-01",
    }

    with TestClient(app) as client:
        assert client.post("/liquidity/forecasts", json=payload).status_code == 200
        metrics = client.get("/metrics")

    assert metrics.status_code == 200
    assert 'liquidity_forecasts_total{outcome="clear"}' in metrics.text


def test_breach_outcome_labels():
    assert breach_outcome(0) == "clear"
    assert breach_outcome(3) == "deficit"
