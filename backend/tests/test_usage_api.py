from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from conftest import make_points, make_subscription
from infra_usage.api.deps import get_subscription_client
from infra_usage.core.config import settings
from infra_usage.main import create_app
from infra_usage.models.enums import PricingTier
from infra_usage.services.platform import PlatformAPIError


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_infrastructure_panel_endpoint(client, monitoring):
    today = datetime.now(timezone.utc)
    monitoring.series["disk_io_budget"] = make_points("disk_io_budget", [0], start=today)
    monitoring.series["cpu_usage"] = make_points("cpu_usage", [12.5, 30])

    response = client.get("/projects/abc123/usage/infrastructure")
    assert response.status_code == 200
    payload = response.json()
    assert payload["project_ref"] == "abc123"
    assert payload["title"] == "Infrastructure"
    assert payload["upgrade_url"].endswith("/project/abc123/settings/addons?panel=computeInstance")

    sections = {section["key"]: section for section in payload["sections"]}
    assert list(sections) == ["cpu_usage", "ram_usage", "disk_io_budget"]
    assert sections["cpu_usage"]["chart"]["y_limit"] == 100
    assert sections["cpu_usage"]["chart"]["y_suffix"] == "%"
    assert [point["values"]["cpu_usage"] for point in sections["cpu_usage"]["chart"]["data"]] == [12.5, 30]
    assert sections["cpu_usage"]["io_budget"] is None

    io_budget = sections["disk_io_budget"]["io_budget"]
    assert io_budget["status"]["severity"] == "depleted"
    assert io_budget["status"]["cta_label"] == "Change compute add-on"
    assert io_budget["overview"][0] == {"label": "Current compute instance", "value": "Micro"}


def test_free_tier_panel(client, subscriptions):
    subscriptions.subscription = make_subscription(tier=PricingTier.FREE)
    response = client.get("/projects/abc123/usage/infrastructure")
    assert response.status_code == 200
    payload = response.json()
    assert payload["is_free_tier"] is True
    assert payload["upgrade_url"].endswith("?panel=subscriptionPlan")
    status = payload["sections"][-1]["io_budget"]["status"]
    assert status == {"severity": "normal", "title": None, "body": None, "cta_label": None}


def test_unknown_project_returns_404(client, subscriptions):
    subscriptions.subscription = None
    response = client.get("/projects/nothere/usage/infrastructure")
    assert response.status_code == 404


def test_subscription_outage_still_renders_panel(client, subscriptions, monitoring):
    subscriptions.error = PlatformAPIError(503, "unavailable")
    response = client.get("/projects/abc123/usage/infrastructure")
    assert response.status_code == 200
    assert response.json()["upgrade_url"].endswith("/project/abc123/settings/billing/subscription")
    assert monitoring.calls == []


@pytest.mark.parametrize("ref", ["ABC", "abc-123", "a" * 65])
def test_invalid_project_ref_returns_400(client, ref):
    response = client.get(f"/projects/{ref}/usage/infrastructure")
    assert response.status_code == 400


@pytest.mark.parametrize(
    ("params", "severity", "cta_label"),
    [
        ({"remaining": 0, "free_tier": "true"}, "depleted", "Upgrade project"),
        ({"remaining": 15, "free_tier": "false"}, "warning", "Change compute add-on"),
        ({"remaining": 45}, "normal", None),
        ({}, "normal", None),
    ],
)
def test_io_budget_endpoint(client, params, severity, cta_label):
    response = client.get("/usage/io-budget", params=params)
    assert response.status_code == 200
    payload = response.json()
    assert payload["severity"] == severity
    assert payload["cta_label"] == cta_label


def test_categories_endpoint(client):
    response = client.get("/usage/categories")
    assert response.status_code == 200
    keys = [category["key"] for category in response.json()]
    assert "infra" in keys


def test_responses_carry_server_timing(client):
    response = client.get("/health")
    assert response.headers["Server-Timing"].startswith("app;dur=")


def test_cors_disabled_by_default(client):
    response = client.get("/health", headers={"Origin": "http://localhost:3000"})
    assert "access-control-allow-origin" not in response.headers


def test_cors_allows_configured_origins():
    config = settings.model_copy(update={"cors_allow_origins": ["https://dashboard.example.com"]})
    cors_client = TestClient(create_app(config))

    response = cors_client.options(
        "/usage/categories",
        headers={"Origin": "https://dashboard.example.com", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://dashboard.example.com"

    response = cors_client.get("/health", headers={"Origin": "https://evil.example.com"})
    assert "access-control-allow-origin" not in response.headers


def test_platform_error_outside_panel_maps_to_bad_gateway(client):
    def broken_client():
        raise PlatformAPIError(401, "invalid service key")

    client.app.dependency_overrides[get_subscription_client] = broken_client
    response = client.get("/projects/abc123/usage/infrastructure")
    assert response.status_code == 502
    assert response.json() == {"detail": "Upstream platform API error", "upstream_status": 401}
