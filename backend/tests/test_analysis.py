r"""backend/tests/test_analysis.py"""

from __future__ import annotations

from datetime import datetime, timezone

from backend.app.models.schemas import PredictionRecord, RiskLevel
from backend.app.services import analysis_service


def _record(pid: str, current: int, predicted: int, level: RiskLevel = RiskLevel.MEDIUM) -> PredictionRecord:
    return PredictionRecord(
        id=int(pid[1:]),
        product_id=pid,
        current_stock=current,
        stock_predicted=predicted,
        risk_level=level,
        success=True,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


RECORDS = [
    _record("P001", 10, 90, RiskLevel.CRITICAL),
    _record("P002", 45, 60, RiskLevel.CRITICAL),
    _record("P003", 80, 20, RiskLevel.LOW),
    _record("P004", 25, 25, RiskLevel.HIGH),
    _record("P005", 5, 40, RiskLevel.HIGH),
]


def test_critical_low_stock() -> None:
    picked = analysis_service.critical_low_stock(RECORDS)

    assert [r.product_id for r in picked] == ["P001"]


def test_top_demand_orders_by_prediction() -> None:
    assert [r.product_id for r in analysis_service.top_demand(RECORDS, limit=2)] == ["P001", "P002"]


def test_shortfalls_only_positive() -> None:
    pairs = analysis_service.shortfalls(RECORDS)

    assert [(r.product_id, need) for r, need in pairs] == [("P001", 80), ("P005", 35), ("P002", 15)]


def test_well_stocked_sorted_by_surplus() -> None:
    pairs = analysis_service.well_stocked(RECORDS)

    assert [(r.product_id, surplus) for r, surplus in pairs] == [("P003", 60), ("P004", 0)]
