r"""backend\app\api\v1\batch.py

Batch prediction endpoints.

``POST /api/v1/predict-batch`` runs the configured product range through the
predictor synchronously and returns the compact summary.  Per-item failures
only show up in the summary counters; the endpoint answers 500 only when the
run itself could not proceed.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ...core.config import load_batch_config
from ...core.errors import ConfigurationError, PersistenceError
from ...models.schemas import BatchResponse, PredictionStats
from ...services.batch_service import compact_summary, random_stock
from ...services.container import ServiceContainer
from ..deps import get_services

LOGGER = logging.getLogger(__name__)
router = APIRouter()


def _failure(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": message},
    )


def _current_stats(services: ServiceContainer) -> Optional[PredictionStats]:
    try:
        return services.store.get_stats()
    except PersistenceError as exc:
        LOGGER.warning("Prediction statistics unavailable: %s", exc)
        return None


@router.post("/predict-batch")
def run_batch(services: ServiceContainer = Depends(get_services)) -> Any:
    try:
        config = load_batch_config(services.settings)
        LOGGER.info("Starting batch predictions via API")
        summary = services.batch.run_batch(
            config.resolved_product_ids(),
            current_stock_generator=random_stock(config.stock_min, config.stock_max),
            inter_request_delay_ms=config.delay_ms,
        )
    except ConfigurationError as exc:
        LOGGER.error("Batch prediction unavailable: %s", exc)
        return _failure(f"Server configuration error: {exc}")
    except Exception as exc:
        LOGGER.exception("Batch prediction run failed")
        return _failure(str(exc) or exc.__class__.__name__)

    stats = _current_stats(services)
    message = (
        "Batch predictions cancelled" if summary.cancelled else "Batch predictions completed successfully"
    )
    response = BatchResponse(
        success=True,
        message=message,
        summary=compact_summary(
            summary,
            risk_distribution=stats.risk_distribution if stats else None,
            top_results=config.top_results,
        ),
        statistics=stats,
    )
    return response.model_dump(mode="json", by_alias=True)


@router.get("/predict-batch")
def batch_info(services: ServiceContainer = Depends(get_services)) -> Any:
    try:
        stats = services.store.get_stats()
        config = load_batch_config(services.settings)
    except Exception as exc:
        LOGGER.warning("Failed to get statistics: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to get statistics", "message": str(exc)},
        )

    product_ids = config.resolved_product_ids()
    return {
        "message": "Batch Prediction API",
        "description": f"Run batch predictions for products {product_ids[0]}-{product_ids[-1]}"
        if product_ids
        else "Run batch predictions",
        "running": services.batch.running,
        "endpoints": {
            "POST": "/api/v1/predict-batch - Run batch predictions",
            "GET": "/api/v1/predict-batch - Get prediction statistics",
            "CANCEL": "/api/v1/predict-batch/cancel - Stop the running batch",
        },
        "currentStatistics": stats.model_dump(mode="json", by_alias=True),
    }


@router.post("/predict-batch/cancel")
def cancel_batch(services: ServiceContainer = Depends(get_services)) -> dict[str, Any]:
    cancelled = services.batch.cancel_active()
    if cancelled:
        LOGGER.info("Cancellation requested for the running batch")
    return {
        "success": cancelled,
        "message": "Cancellation requested" if cancelled else "No batch run in progress",
    }
