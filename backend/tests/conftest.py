"""Shared test fixtures.

- in-memory SQLite prediction store (isolated per test)
- stub predictor clients returning canned responses
- a TestClient wired to those through the service container
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from backend.app.core.config import Settings  # noqa: E402
from backend.app.main import create_app  # noqa: E402
from backend.app.services.catalog_service import SalesCatalog  # noqa: E402
from backend.app.services.container import ServiceContainer  # noqa: E402
from backend.app.services.prediction_store import PredictionStore  # noqa: E402
from backend.app.services.predictor_client import PredictResult  # noqa: E402

LOW_RISK_LINE = "📊 120 units, Low risk, Base Demand"


class StubPredictor:
    """Predictor returning a fixed result per product (``default`` otherwise)."""

    def __init__(
        self,
        responses: Optional[Dict[str, PredictResult]] = None,
        default: Optional[PredictResult] = None,
    ) -> None:
        self.responses = dict(responses or {})
        self.default = default or PredictResult.success([LOW_RISK_LINE])
        self.calls: List[Tuple[str, int]] = []

    def predict(self, product_id: str, current_stock: int) -> PredictResult:
        self.calls.append((product_id, current_stock))
        return self.responses.get(product_id, self.default)


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = {
        "db_url": "sqlite://",
        "rate_limit_per_min": 0,
        "api_token": None,
        "config_dir": str(tmp_path),
        "products_csv_url": str(tmp_path / "sales.csv"),
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def store() -> PredictionStore:
    prediction_store = PredictionStore.from_url("sqlite://")
    prediction_store.init_schema()
    return prediction_store


@pytest.fixture
def stub_predictor() -> StubPredictor:
    return StubPredictor()


@pytest.fixture
def services(tmp_path: Path, store: PredictionStore, stub_predictor: StubPredictor) -> ServiceContainer:
    settings = make_settings(tmp_path)
    return ServiceContainer(
        settings=settings,
        store=store,
        model_client=stub_predictor,
        batch_client=stub_predictor,
        catalog=SalesCatalog(settings.products_csv_url),
    )


@pytest.fixture
def client(services: ServiceContainer) -> TestClient:
    with TestClient(create_app(services)) as test_client:
        yield test_client
