"""Summaries over stored predictions used by the CLI and dashboard."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from ..models.schemas import PredictionRecord, RiskLevel

LOW_STOCK_THRESHOLD = 30


def shortfall(record: PredictionRecord) -> int:
    """Units still needed to cover the predicted demand (negative = surplus)."""

    return record.stock_predicted - record.current_stock


def critical_low_stock(
    records: Iterable[PredictionRecord], threshold: int = LOW_STOCK_THRESHOLD
) -> List[PredictionRecord]:
    return [
        record
        for record in records
        if record.risk_level == RiskLevel.CRITICAL and record.current_stock < threshold
    ]


def top_demand(records: Sequence[PredictionRecord], limit: int = 10) -> List[PredictionRecord]:
    return sorted(records, key=lambda record: record.stock_predicted, reverse=True)[:limit]


def shortfalls(records: Sequence[PredictionRecord], limit: int = 10) -> List[Tuple[PredictionRecord, int]]:
    """Largest positive shortfalls first, paired with the shortfall value."""

    pairs = [(record, shortfall(record)) for record in records]
    pairs = [pair for pair in pairs if pair[1] > 0]
    pairs.sort(key=lambda pair: pair[1], reverse=True)
    return pairs[:limit]


def well_stocked(records: Sequence[PredictionRecord]) -> List[Tuple[PredictionRecord, int]]:
    """Records whose current stock covers the prediction, largest surplus first."""

    pairs = [(record, -shortfall(record)) for record in records if record.current_stock >= record.stock_predicted]
    pairs.sort(key=lambda pair: pair[1], reverse=True)
    return pairs
