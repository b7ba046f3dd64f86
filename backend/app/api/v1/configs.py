"""API endpoints for reading and updating the batch configuration YAML."""

from __future__ import annotations

import os
import shutil
import tempfile
from typing import Any, Dict, List, Optional

import yaml
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, ValidationError

from ...core.config import BatchConfig, batch_config_path, load_batch_config, load_yaml
from ...services.container import ServiceContainer
from ..deps import get_services

router = APIRouter()


def _safe_write_yaml(path: str, payload: Dict[str, Any]) -> None:
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(
        prefix=".tmp-", suffix=".yaml", dir=directory
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            yaml.safe_dump(payload, handle, sort_keys=False)
        shutil.move(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)


class BatchConfigUpdate(BaseModel):
    product_count: Optional[int] = Field(None, ge=1, le=999)
    product_prefix: Optional[str] = Field(None, min_length=1, max_length=16)
    product_ids: Optional[List[str]] = None
    delay_ms: Optional[int] = Field(None, ge=0, le=60_000)
    stock_min: Optional[int] = Field(None, ge=0)
    stock_max: Optional[int] = Field(None, ge=0)
    top_results: Optional[int] = Field(None, ge=0, le=1000)


def _merge_updates(original: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    result = original.copy()
    result.update({k: v for k, v in updates.items() if v is not None})
    return result


@router.get("/configs/batch")
def get_batch_config(services: ServiceContainer = Depends(get_services)) -> Dict[str, Any]:
    """Return the effective batch settings (file values over defaults)."""

    return load_batch_config(services.settings).model_dump()


@router.put("/configs/batch")
def put_batch_config(
    body: BatchConfigUpdate,
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    path = batch_config_path(services.settings)
    current = load_yaml(path)
    updated = _merge_updates(current, body.model_dump(exclude_none=True))

    try:
        effective = BatchConfig.model_validate(updated)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_config", "message": str(exc)},
        ) from exc

    if updated == current:
        return effective.model_dump()

    try:
        _safe_write_yaml(path, updated)
    except OSError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "write_failed", "message": str(exc)},
        ) from exc
    return effective.model_dump()
