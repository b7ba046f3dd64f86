r"""backend/tests/test_auth_and_rate.py"""

from __future__ import annotations

import json
import logging

from fastapi.testclient import TestClient

from backend.app.main import create_app
from backend.app.services.container import ServiceContainer

from conftest import make_settings


def _client_with(services: ServiceContainer, tmp_path, **overrides) -> TestClient:
    services.settings = make_settings(tmp_path, **overrides)
    return TestClient(create_app(services))


def test_auth_and_rate_limit(services, tmp_path) -> None:
    client = _client_with(services, tmp_path, api_token="X", rate_limit_per_min=1)

    response = client.get("/api/v1/predictions")
    assert response.status_code == 401

    authed = client.get("/api/v1/predictions", headers={"Authorization": "Bearer X"})
    assert authed.status_code == 200

    limited = client.get("/api/v1/predictions", headers={"Authorization": "Bearer X"})
    assert limited.status_code == 429


def test_health_and_metrics_skip_auth(services, tmp_path) -> None:
    client = _client_with(services, tmp_path, api_token="X")

    assert client.get("/api/v1/health").status_code == 200
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "http_requests_total" in metrics.text


def test_access_log_includes_product_id(services, tmp_path, caplog) -> None:
    client = _client_with(services, tmp_path)

    with caplog.at_level(logging.INFO, logger="backend.access"):
        client.post("/api/v1/predict", json={"productId": "P042", "currentStock": 3})

    entries = [json.loads(record.getMessage()) for record in caplog.records if record.name == "backend.access"]
    assert any(entry["product_id"] == "P042" and entry["status"] == 200 for entry in entries)
