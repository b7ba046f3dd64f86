r"""backend\app\api\v1\predict.py

Single-product prediction endpoint.

``POST /api/v1/predict`` accepts ``{"productId": str, "currentStock": int}``,
asks the hosted model for a prediction, parses it and stores the result.  The
response carries the per-item outcome plus a ``database`` object describing
whether the record was saved.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from ...core.errors import ConfigurationError
from ...services.container import ServiceContainer
from ..deps import get_services

LOGGER = logging.getLogger(__name__)
router = APIRouter()

MISSING_FIELDS = "Missing required fields: productId and currentStock"
INVALID_TYPES = "Invalid data types: productId must be string, currentStock must be number"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _validate(payload: Any) -> Tuple[Optional[str], Optional[int], Optional[str]]:
    """Return ``(product_id, current_stock, error)`` for a raw JSON body."""

    if not isinstance(payload, dict):
        return None, None, MISSING_FIELDS

    product_id = payload.get("productId")
    current_stock = payload.get("currentStock")
    if not product_id or current_stock is None:
        return None, None, MISSING_FIELDS
    if not isinstance(product_id, str) or isinstance(current_stock, bool):
        return None, None, INVALID_TYPES
    if not isinstance(current_stock, (int, float)):
        return None, None, INVALID_TYPES
    if isinstance(current_stock, float):
        if not current_stock.is_integer():
            return None, None, "currentStock must be a whole number"
        current_stock = int(current_stock)
    if current_stock < 0:
        return None, None, "currentStock must not be negative"
    return product_id, current_stock, None


@router.post("/predict")
def predict(
    payload: Any = Body(None),
    services: ServiceContainer = Depends(get_services),
) -> Any:
    product_id, current_stock, error = _validate(payload)
    if error:
        return _error(status.HTTP_400_BAD_REQUEST, error)

    try:
        outcome, report = services.pipeline.predict_and_store(product_id, current_stock)
    except ConfigurationError as exc:
        LOGGER.error("Prediction unavailable: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Server configuration error: {exc}")
    except Exception as exc:  # pragma: no cover - defensive programming
        LOGGER.exception("Prediction for %s crashed", product_id)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Prediction failed: {exc}")

    if outcome.data is None:
        # The model never answered; the failure record is already stored.
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Prediction failed: {outcome.error}")

    body = outcome.model_dump(mode="json", by_alias=True)
    body["database"] = report.model_dump(mode="json", by_alias=True)
    return body


@router.get("/predict")
def predict_usage() -> dict[str, Any]:
    """Describe how to call the prediction endpoint."""

    return {
        "message": "Inventory Prediction API",
        "endpoints": {
            "POST": "/api/v1/predict",
            "description": "Send productId and currentStock to get inventory predictions",
        },
        "usage": {
            "method": "POST",
            "body": {"productId": "string", "currentStock": "number"},
        },
    }
