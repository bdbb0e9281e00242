"""Integration tests for API endpoints"""

import json

import pytest
from fastapi.testclient import TestClient

from fundability_engine.api.dependencies import get_webhook_configs
from fundability_engine.api.main import create_app
from fundability_engine.config import settings
from fundability_engine.infrastructure.webhooks.formatters import WebhookConfig, WebhookType

pytestmark = pytest.mark.integration


class RecordingWebhookClient:
    """Stands in for WebhookClient and records every broadcast"""

    def __init__(self):
        self.calls = []

    async def broadcast(self, configs, payload):
        self.calls.append((configs, payload))
        return {"success": len(configs), "failed": 0}


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "fundability-engine"}


def test_metrics_endpoint(client: TestClient, valid_body):
    """Test Prometheus metrics endpoint"""
    client.post("/v1/fs-snapshot", json=valid_body)

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "fundability_assessment_total" in response.text


def test_snapshot_success(client: TestClient, valid_body):
    """Test POST /v1/fs-snapshot with a strong profile"""
    response = client.post("/v1/fs-snapshot", json=valid_body)

    assert response.status_code == 200
    data = response.json()
    assert data["fundability_score"] == 86
    assert data["fundability_tier_numeric"] == 1
    assert data["fundability_tier_label"] == "Tier 1 – Ready Now (Prime)"
    assert data["subscores"] == {
        "credit_score_subscore": 90,
        "utilization_subscore": 90,
        "dti_subscore": 85,
        "inquiry_subscore": 95,
        "depth_mix_subscore": 95,
        "penalty_points": 0,
    }
    assert data["high_impact_actions"] == []
    assert data["funding_range_now"] == "Moderate–High ($50K–$150K+)"
    assert data["funding_range_after_optimization"] == "High ($75K–$200K+)"
    assert data["flags"]["high_risk_profile"] is False
    assert data["meta"]["version"] == "fs_engine_v1.0"
    assert "X-Request-ID" in response.headers


def test_snapshot_echoes_request_id(client: TestClient, valid_body):
    response = client.post("/v1/fs-snapshot", json=valid_body, headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_snapshot_legacy_path(client: TestClient, valid_body):
    response = client.post("/api/fs-snapshot", json=valid_body)

    assert response.status_code == 200
    assert response.json()["fundability_score"] == 86


def test_snapshot_validation_errors(client: TestClient, valid_body):
    """Test every violated constraint comes back in details"""
    valid_body.update({"email": "nope", "requested_amount": 0})

    response = client.post("/v1/fs-snapshot", json=valid_body)

    assert response.status_code == 400
    assert response.json() == {
        "error": "Validation failed",
        "details": [
            "email is required and must be a valid email address",
            "requested_amount is required and must be a positive number",
        ],
    }


def test_snapshot_rejects_non_finite_numbers(client: TestClient, valid_body):
    """Test NaN literals in the body are validation errors, not scores"""
    body = dict(valid_body, oldest_account_years=float("nan"), requested_amount=float("nan"))

    response = client.post(
        "/v1/fs-snapshot",
        content=json.dumps(body),
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["details"] == [
        "oldest_account_years must be a non-negative number",
        "requested_amount is required and must be a positive number",
    ]


def test_snapshot_invalid_json(client: TestClient):
    response = client.post(
        "/v1/fs-snapshot",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Validation failed", "details": ["Request body must be valid JSON"]}


def test_snapshot_non_object_body(client: TestClient):
    response = client.post("/v1/fs-snapshot", json=[1, 2, 3])

    assert response.status_code == 400
    assert response.json()["details"] == ["Request body must be a JSON object"]


def test_snapshot_wrong_method(client: TestClient):
    response = client.get("/v1/fs-snapshot")

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}


def test_analytics_wrong_method(client: TestClient):
    response = client.post("/v1/fs-analytics", json={})

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}


def test_unknown_path_is_404(client: TestClient):
    assert client.get("/v1/nope").status_code == 404


def test_snapshot_internal_error_hides_detail_in_production(client: TestClient, valid_body, monkeypatch):
    def explode(fundability_input):
        raise RuntimeError("scoring exploded")

    monkeypatch.setattr("fundability_engine.api.v1.snapshot.calculate_fundability_snapshot", explode)
    monkeypatch.setattr(settings, "environment", "production")

    response = client.post("/v1/fs-snapshot", json=valid_body)

    assert response.status_code == 500
    assert response.json() == {
        "error": "Internal server error",
        "details": ["An unexpected error occurred processing your request"],
    }


def test_snapshot_internal_error_shows_detail_in_development(client: TestClient, valid_body, monkeypatch):
    def explode(fundability_input):
        raise RuntimeError("scoring exploded")

    monkeypatch.setattr("fundability_engine.api.v1.snapshot.calculate_fundability_snapshot", explode)
    monkeypatch.setattr(settings, "environment", "development")

    response = client.post("/v1/fs-snapshot", json=valid_body)

    assert response.status_code == 500
    assert response.json()["details"] == ["scoring exploded"]


def test_snapshot_survives_analytics_failure(client: TestClient, store, valid_body, monkeypatch):
    def broken_track(*args, **kwargs):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(store, "track", broken_track)

    response = client.post("/v1/fs-snapshot", json=valid_body)

    assert response.status_code == 200


def test_snapshot_schedules_webhooks(store, valid_body):
    """Test configured destinations receive the assessment after the response"""
    webhook_client = RecordingWebhookClient()
    app = create_app(analytics_store=store, webhook_client=webhook_client)
    destinations = [WebhookConfig(url="https://hooks.slack.test/abc", type=WebhookType.SLACK)]
    app.dependency_overrides[get_webhook_configs] = lambda: destinations

    response = TestClient(app).post("/v1/fs-snapshot", json=valid_body)

    assert response.status_code == 200
    assert len(webhook_client.calls) == 1
    configs, payload = webhook_client.calls[0]
    assert configs == destinations
    assert payload["event"] == "fundability_calculated"
    assert payload["score"]["value"] == 86


def test_snapshot_without_webhooks_sends_nothing(store, valid_body):
    webhook_client = RecordingWebhookClient()
    app = create_app(analytics_store=store, webhook_client=webhook_client)
    app.dependency_overrides[get_webhook_configs] = lambda: []

    TestClient(app).post("/v1/fs-snapshot", json=valid_body)

    assert webhook_client.calls == []


def test_analytics_after_assessments(client: TestClient, valid_body):
    """Test GET /v1/fs-analytics aggregates tracked snapshots"""
    client.post("/v1/fs-snapshot", json=valid_body)
    client.post("/v1/fs-snapshot", json=dict(valid_body, email="grace@example.com", credit_score=560))
    client.post("/v1/fs-snapshot", json=dict(valid_body, email="bad"))

    response = client.get("/v1/fs-analytics")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["meta"]["version"] == "fs_analytics_v1.0"
    assert body["data"]["totals"]["assessments"] == 2
    assert body["data"]["totals"]["unique_clients"] == 2
    assert body["data"]["goal_distribution"] == {"business_funding": 2}


def test_analytics_filters(client: TestClient, valid_body):
    client.post("/v1/fs-snapshot", json=valid_body)
    client.post("/v1/fs-snapshot", json=dict(valid_body, primary_goal="startup_funding"))

    response = client.get("/v1/fs-analytics", params={"goal": "startup_funding", "tier": "1"})

    assert response.status_code == 200
    assert response.json()["data"]["totals"]["assessments"] == 1


def test_analytics_empty_store(client: TestClient):
    response = client.get("/api/fs-analytics")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totals"]["assessments"] == 0
    assert data["tier_distribution"] == {"tier_1": 0, "tier_2": 0, "tier_3": 0, "tier_4": 0}


def test_analytics_rejects_invalid_filters(client: TestClient):
    response = client.get(
        "/v1/fs-analytics",
        params={"start_date": "yesterday", "tier": "7", "goal": "get_rich"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    assert body["details"][0] == "start_date must be an ISO-8601 date or datetime"
    assert body["details"][1] == "tier must be one of: 1, 2, 3, 4"
    assert body["details"][2].startswith("goal must be one of: startup_funding")


def test_analytics_date_window_excludes_past_records(client: TestClient, valid_body):
    client.post("/v1/fs-snapshot", json=valid_body)

    response = client.get("/v1/fs-analytics", params={"start_date": "2020-01-01", "end_date": "2020-12-31"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totals"]["assessments"] == 0
    assert data["period"]["start"] == "2020-01-01T00:00:00.000Z"
    assert data["period"]["end"] == "2020-12-31T23:59:59.999Z"


def test_analytics_rejects_non_numeric_tier_and_bad_end_date(client: TestClient):
    response = client.get("/v1/fs-analytics", params={"end_date": "2024-13-45", "tier": "abc"})

    assert response.status_code == 400
    assert response.json() == {
        "error": "Validation failed",
        "details": ["end_date must be an ISO-8601 date or datetime", "tier must be one of: 1, 2, 3, 4"],
    }


def test_analytics_blank_filters_are_ignored(client: TestClient, valid_body):
    client.post("/v1/fs-snapshot", json=valid_body)

    response = client.get("/v1/fs-analytics", params={"start_date": "", "tier": "", "goal": ""})

    assert response.status_code == 200
    assert response.json()["data"]["totals"]["assessments"] == 1
