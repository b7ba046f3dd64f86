"""
Application configuration utilities.

This module defines the ``Settings`` class used throughout the service for
environment variables and provides helpers to load the YAML file holding the
batch prediction parameters (product range, pacing, stock generator bounds).
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PRODUCTS_CSV_URL = (
    "https://raw.githubusercontent.com/Arpit-Raj1/walmart-smart-inventory-management/"
    "main/public/40_product_walmart_india_sales_data__3.csv"
)


class Settings(BaseSettings):
    """Configuration loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # API server configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_token: Optional[str] = None
    rate_limit_per_min: int = 60
    cors_origins: str = ""

    # Relational store holding one live prediction per product
    db_url: str = "sqlite:///./inventory.db"

    # Remote predictor endpoint used by batch runs. When unset the batch talks
    # to the ML hosting service directly.
    predictor_base_url: Optional[str] = None
    predictor_path: str = "/api/v1/predict"
    predictor_timeout_seconds: float = 30.0

    # ML hosting service (Gradio space) and the training file it is fed
    gradio_link: Optional[str] = None
    training_link: Optional[str] = None

    products_csv_url: str = DEFAULT_PRODUCTS_CSV_URL
    config_dir: str = "configs"
    log_level: str = "INFO"

    def cors_origin_list(self) -> List[str]:
        origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        return origins or ["*"]


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return a cached instance of ``Settings``.

    Using a cache ensures that environment variables are only read once.
    """
    return Settings()


def load_yaml(file_path: str) -> dict:
    """Load a YAML file from the given path and return its contents.

    If the file does not exist, an empty dictionary is returned.
    """
    if not os.path.exists(file_path):
        return {}
    with open(file_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


class BatchConfig(BaseModel):
    """Business parameters of a batch prediction run (``configs/batch.yaml``)."""

    product_count: int = Field(40, ge=1, le=999)
    product_prefix: str = Field("P", min_length=1)
    product_ids: Optional[List[str]] = None
    delay_ms: int = Field(500, ge=0, le=60_000)
    stock_min: int = Field(1, ge=0)
    stock_max: int = Field(100, ge=0)
    top_results: int = Field(10, ge=0, le=1000)

    @model_validator(mode="after")
    def _check_stock_bounds(self) -> "BatchConfig":
        if self.stock_min > self.stock_max:
            raise ValueError("stock_min must not exceed stock_max")
        return self

    def resolved_product_ids(self) -> List[str]:
        """Return the ordered identifiers to run, e.g. ``P001`` .. ``P040``."""

        if self.product_ids:
            return [str(pid) for pid in self.product_ids if str(pid).strip()]
        return [f"{self.product_prefix}{i:03d}" for i in range(1, self.product_count + 1)]


def batch_config_path(settings: Settings) -> str:
    return os.path.join(settings.config_dir, "batch.yaml")


def load_batch_config(settings: Settings) -> BatchConfig:
    """Read ``batch.yaml`` and fall back to defaults for missing keys."""

    data: Dict[str, Any] = load_yaml(batch_config_path(settings))
    if not isinstance(data, dict):
        data = {}
    return BatchConfig.model_validate({k: v for k, v in data.items() if v is not None})
