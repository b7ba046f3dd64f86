"""Process-wide service wiring.

``build_services`` turns :class:`Settings` into the objects the routes and the
CLI share.  Tests build a :class:`ServiceContainer` by hand with an in-memory
store and stub clients and pass it to ``create_app``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..core.config import Settings, get_settings
from .batch_service import BatchOrchestrator
from .catalog_service import SalesCatalog
from .prediction_service import PredictionPipeline
from .prediction_store import PredictionStore
from .predictor_client import GradioPredictorClient, HttpPredictorClient, Predictor

LOGGER = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    store: PredictionStore
    model_client: Predictor
    batch_client: Predictor
    catalog: SalesCatalog
    pipeline: PredictionPipeline = field(init=False)
    batch: BatchOrchestrator = field(init=False)
    batch_pipeline: PredictionPipeline = field(init=False)

    def __post_init__(self) -> None:
        self.pipeline = PredictionPipeline(self.model_client, self.store)
        self.batch_pipeline = PredictionPipeline(self.batch_client, self.store)
        self.batch = BatchOrchestrator(self.batch_pipeline)


def build_predictor_clients(settings: Settings) -> tuple[Predictor, Predictor]:
    """Return ``(model_client, batch_client)``.

    ``/predict`` always talks to the hosted model.  Batch runs go through the
    HTTP predictor when ``PREDICTOR_BASE_URL`` is configured and otherwise
    reuse the hosted-model client.
    """

    model_client = GradioPredictorClient(
        settings.gradio_link,
        settings.training_link,
        timeout=settings.predictor_timeout_seconds,
    )
    if settings.predictor_base_url:
        headers = {"Authorization": f"Bearer {settings.api_token}"} if settings.api_token else None
        batch_client: Predictor = HttpPredictorClient(
            settings.predictor_base_url,
            path=settings.predictor_path,
            timeout=settings.predictor_timeout_seconds,
            headers=headers,
        )
        LOGGER.info("Batch runs use HTTP predictor at %s", batch_client.url)
    else:
        batch_client = model_client
    return model_client, batch_client


def build_services(settings: Optional[Settings] = None) -> ServiceContainer:
    settings = settings or get_settings()
    model_client, batch_client = build_predictor_clients(settings)
    return ServiceContainer(
        settings=settings,
        store=PredictionStore.from_url(settings.db_url),
        model_client=model_client,
        batch_client=batch_client,
        catalog=SalesCatalog(settings.products_csv_url),
    )
