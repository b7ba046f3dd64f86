r"""backend/tests/test_prediction_store.py"""

from __future__ import annotations

import pytest

from backend.app.core.errors import PersistenceError
from backend.app.models.schemas import PredictionInput, RiskLevel
from backend.app.services.prediction_store import PredictionStore


def _input(product_id: str, stock: int, **extra) -> PredictionInput:
    return PredictionInput(product_id=product_id, current_stock=stock, **extra)


def test_upsert_keeps_one_record_per_product(store: PredictionStore) -> None:
    first = store.upsert(_input("P001", 10, stock_predicted=50, risk_level=RiskLevel.HIGH, success=True))
    second = store.upsert(_input("P001", 20, stock_predicted=30, risk_level=RiskLevel.LOW, success=True))

    records = store.get_all(50)
    assert [record.product_id for record in records] == ["P001"]
    assert records[0].current_stock == 20
    assert records[0].risk_level == RiskLevel.LOW
    assert second.id == first.id
    assert second.created_at >= first.created_at


def test_get_all_orders_most_recent_first(store: PredictionStore) -> None:
    for product_id in ("P001", "P002", "P003"):
        store.upsert(_input(product_id, 5))
    store.upsert(_input("P001", 6))

    ordered = [record.product_id for record in store.get_all(10)]
    assert ordered[0] == "P001"
    assert sorted(ordered) == ["P001", "P002", "P003"]
    assert len(store.get_all(2)) == 2


def test_stats_and_grouping(store: PredictionStore) -> None:
    store.upsert(_input("P001", 5, risk_level=RiskLevel.CRITICAL, success=True))
    store.upsert(_input("P002", 5, risk_level=RiskLevel.CRITICAL, success=True))
    store.upsert(_input("P003", 5, risk_level=RiskLevel.LOW, success=True))
    store.upsert(_input("P004", 5))

    stats = store.get_stats()
    assert stats.total == 4
    assert stats.successful == 3
    assert stats.success_rate == pytest.approx(75.0)
    assert stats.risk_distribution == {
        RiskLevel.CRITICAL: 2,
        RiskLevel.LOW: 1,
        RiskLevel.MEDIUM: 1,
    }
    assert store.count(success=False) == 1
    assert [r.product_id for r in store.get_by_risk(RiskLevel.LOW)] == ["P003"]


def test_empty_store(store: PredictionStore) -> None:
    stats = store.get_stats()

    assert stats.total == 0
    assert stats.success_rate == 0.0
    assert stats.risk_distribution == {}
    assert store.find_latest_by_product("P404") is None
    assert store.ping() is True


def test_missing_table_raises_persistence_error() -> None:
    bare = PredictionStore.from_url("sqlite://")

    with pytest.raises(PersistenceError):
        bare.upsert(_input("P001", 1))
