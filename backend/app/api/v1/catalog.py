r"""backend\app\api\v1\catalog.py"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from ...services.container import ServiceContainer
from ..deps import get_services

LOGGER = logging.getLogger(__name__)
router = APIRouter()


@router.get("/products", response_model=None)
def list_products(
    services: ServiceContainer = Depends(get_services),
) -> List[Dict[str, str]] | JSONResponse:
    """Return every row of the sales history CSV."""
    try:
        return services.catalog.records()
    except Exception as exc:
        LOGGER.exception("Failed to read sales data: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to fetch data"},
        )


@router.get("/products/by-id-and-date", response_model=None)
def products_by_id_and_date(
    product_id: Optional[str] = Query(None),
    date: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$"),
    services: ServiceContainer = Depends(get_services),
) -> List[Dict[str, str]] | JSONResponse:
    """Rows for one product on one day (default: the same day two years ago)."""
    if not product_id:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Missing 'product_id' query parameter"},
        )
    try:
        return services.catalog.by_id_and_date(product_id, date)
    except Exception as exc:
        LOGGER.exception("Failed to read sales data: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to fetch data"},
        )
