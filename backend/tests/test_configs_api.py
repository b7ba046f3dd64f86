r"""backend/tests/test_configs_api.py"""

from __future__ import annotations

from pathlib import Path

import yaml
from fastapi.testclient import TestClient


def test_get_batch_config_defaults(client: TestClient) -> None:
    response = client.get("/api/v1/configs/batch")

    assert response.status_code == 200
    body = response.json()
    assert body["product_count"] == 40
    assert body["delay_ms"] == 500
    assert body["stock_min"] == 1 and body["stock_max"] == 100


def test_put_batch_config_merges_and_writes(client: TestClient, services) -> None:
    path = Path(services.settings.config_dir) / "batch.yaml"
    path.write_text(yaml.safe_dump({"product_count": 40, "delay_ms": 500}))

    response = client.put("/api/v1/configs/batch", json={"delay_ms": 250})

    assert response.status_code == 200
    assert response.json()["delay_ms"] == 250
    assert yaml.safe_load(path.read_text()) == {"product_count": 40, "delay_ms": 250}


def test_put_batch_config_rejects_inverted_stock_bounds(client: TestClient, services) -> None:
    response = client.put("/api/v1/configs/batch", json={"stock_min": 90, "stock_max": 10})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "invalid_config"
    assert not (Path(services.settings.config_dir) / "batch.yaml").exists()


def test_put_batch_config_field_validation(client: TestClient) -> None:
    response = client.put("/api/v1/configs/batch", json={"delay_ms": -1})

    assert response.status_code == 422
