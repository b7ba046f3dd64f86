r"""backend/tests/test_batch_api.py"""

from __future__ import annotations

import threading
import time
from pathlib import Path

import yaml
from fastapi.testclient import TestClient

from backend.app.core.errors import ConfigurationError
from backend.app.services.predictor_client import PredictResult


def _write_batch_config(services, **values) -> None:
    path = Path(services.settings.config_dir) / "batch.yaml"
    path.write_text(yaml.safe_dump(values))


def test_post_batch_returns_compact_summary(client: TestClient, services, stub_predictor) -> None:
    _write_batch_config(services, product_count=3, delay_ms=0, stock_min=10, stock_max=10)
    stub_predictor.responses["P002"] = PredictResult.failure("timeout")

    response = client.post("/api/v1/predict-batch")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Batch predictions completed successfully"
    summary = body["summary"]
    assert summary["totalProducts"] == 3
    assert summary["successfulPredictions"] == 2
    assert summary["failedPredictions"] == 1
    assert summary["successRate"] == "66.67%"
    assert summary["cancelled"] is False
    assert [item["productId"] for item in summary["results"]] == ["P001", "P003"]
    assert summary["results"][0] == {
        "productId": "P001",
        "currentStock": 10,
        "stockPredicted": 120,
        "riskLevel": "LOW",
        "success": True,
    }
    assert summary["riskDistribution"] == {"LOW": 2, "MEDIUM": 1}
    assert body["statistics"]["total"] == 3
    assert stub_predictor.calls == [("P001", 10), ("P002", 10), ("P003", 10)]


def test_post_batch_uses_explicit_ids(client: TestClient, services, stub_predictor) -> None:
    _write_batch_config(services, product_ids=["SKU-9", "SKU-4"], delay_ms=0, top_results=1)

    body = client.post("/api/v1/predict-batch").json()

    assert [pid for pid, _ in stub_predictor.calls] == ["SKU-9", "SKU-4"]
    assert len(body["summary"]["results"]) == 1


def test_post_batch_configuration_error(client: TestClient, services, stub_predictor, monkeypatch) -> None:
    _write_batch_config(services, product_count=2, delay_ms=0)

    def _raise(product_id, current_stock):
        raise ConfigurationError("PREDICTOR_BASE_URL environment variable is not set")

    monkeypatch.setattr(stub_predictor, "predict", _raise)

    response = client.post("/api/v1/predict-batch")

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Server configuration error: PREDICTOR_BASE_URL environment variable is not set",
    }


def test_post_batch_loop_crash_is_500(client: TestClient, services, monkeypatch) -> None:
    _write_batch_config(services, product_count=1, delay_ms=0)

    def _boom(*args, **kwargs):
        raise RuntimeError("loop exploded")

    monkeypatch.setattr(services.batch, "run_batch", _boom)

    response = client.post("/api/v1/predict-batch")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "loop exploded"}


def test_get_batch_info(client: TestClient, services) -> None:
    _write_batch_config(services, product_count=40)

    response = client.get("/api/v1/predict-batch")

    assert response.status_code == 200
    body = response.json()
    assert body["description"] == "Run batch predictions for products P001-P040"
    assert body["running"] is False
    assert body["currentStatistics"]["total"] == 0


def test_cancel_without_run(client: TestClient) -> None:
    response = client.post("/api/v1/predict-batch/cancel")

    assert response.status_code == 200
    assert response.json()["success"] is False


def test_cancel_running_batch(client: TestClient, services) -> None:
    _write_batch_config(services, product_count=40, delay_ms=100)
    result = {}

    def _run() -> None:
        result["response"] = client.post("/api/v1/predict-batch")

    worker = threading.Thread(target=_run)
    worker.start()

    deadline = time.time() + 5
    while not services.batch.running and time.time() < deadline:
        time.sleep(0.01)
    time.sleep(0.2)

    cancel = client.post("/api/v1/predict-batch/cancel")
    worker.join(timeout=10)

    assert cancel.json()["success"] is True
    body = result["response"].json()
    assert body["message"] == "Batch predictions cancelled"
    assert body["summary"]["cancelled"] is True
    assert 0 < body["summary"]["totalProducts"] < 40
