r"""backend\app\api\v1\predictions.py

Read-only views over stored predictions used by the dashboard.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...core.errors import PersistenceError
from ...models.schemas import PredictionRecord, RiskCounts, RiskLevel
from ...services.container import ServiceContainer
from ..deps import get_services

LOGGER = logging.getLogger(__name__)
router = APIRouter()


def _error_payload(code: str, message: str) -> Dict[str, str]:
    return {"error": code, "message": message}


def _dump(records: List[PredictionRecord]) -> List[Dict[str, Any]]:
    return [record.model_dump(mode="json", by_alias=True) for record in records]


def risk_counts(records: List[PredictionRecord]) -> RiskCounts:
    """Count records per risk bucket; ``high`` also includes CRITICAL."""

    levels = [record.risk_level for record in records]
    return RiskCounts(
        critical=levels.count(RiskLevel.CRITICAL),
        high=levels.count(RiskLevel.CRITICAL) + levels.count(RiskLevel.HIGH),
        medium=levels.count(RiskLevel.MEDIUM),
        low=levels.count(RiskLevel.LOW),
        all=len(levels),
    )


def _unavailable(exc: PersistenceError) -> HTTPException:
    LOGGER.error("Prediction store unavailable: %s", exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=_error_payload("store_unavailable", "Failed to fetch predictions"),
    )


@router.get("/predictions")
def list_predictions(
    limit: int = Query(100, ge=1, le=1000),
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    try:
        records = services.store.get_all(limit)
    except PersistenceError as exc:
        raise _unavailable(exc) from exc
    return {"success": True, "predictions": _dump(records), "count": len(records)}


@router.get("/predictions/dashboard")
def dashboard(
    limit: int = Query(100, ge=1, le=1000),
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    try:
        records = services.store.get_all(limit)
    except PersistenceError as exc:
        raise _unavailable(exc) from exc
    return {
        "success": True,
        "predictions": _dump(records),
        "counts": risk_counts(records).model_dump(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/predictions/stats")
def prediction_stats(services: ServiceContainer = Depends(get_services)) -> Dict[str, Any]:
    try:
        stats = services.store.get_stats()
    except PersistenceError as exc:
        raise _unavailable(exc) from exc
    return stats.model_dump(mode="json", by_alias=True)


@router.get("/predictions/{product_id}")
def prediction_for_product(
    product_id: str,
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    try:
        record = services.store.find_latest_by_product(product_id)
    except PersistenceError as exc:
        raise _unavailable(exc) from exc
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=_error_payload("not_found", f"No prediction stored for {product_id}"),
        )
    return record.model_dump(mode="json", by_alias=True)
