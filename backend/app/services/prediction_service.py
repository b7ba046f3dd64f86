"""Run one product through predictor, parser and store."""

from __future__ import annotations

import logging
from typing import Tuple

from ..core.errors import ConfigurationError, ParseError
from ..models.schemas import ItemOutcome, PersistenceReport, PredictionInput, RiskLevel
from .prediction_store import PredictionStore
from .predictor_client import Predictor
from .response_parser import parse_prediction

LOGGER = logging.getLogger(__name__)


class PredictionPipeline:
    """Glue between a :class:`Predictor` and the :class:`PredictionStore`.

    ``predict_and_store`` never raises for per-item problems: transport
    failures, unparseable responses and storage errors all end up in the
    returned :class:`ItemOutcome`.  Only :class:`ConfigurationError` escapes,
    since no other product would fare any better.
    """

    def __init__(self, client: Predictor, store: PredictionStore) -> None:
        self.client = client
        self.store = store

    def predict_and_store(self, product_id: str, current_stock: int) -> Tuple[ItemOutcome, PersistenceReport]:
        result = self.client.predict(product_id, current_stock)

        if not result.ok:
            error = result.error or "Prediction failed"
            LOGGER.warning("Prediction failed for %s: %s", product_id, error)
            outcome = ItemOutcome(
                product_id=product_id,
                current_stock=current_stock,
                success=False,
                error=error,
            )
            return outcome, self._persist_failure(product_id, current_stock)

        try:
            parsed = parse_prediction(result.data)
        except ParseError as exc:
            LOGGER.warning("Unparseable prediction for %s: %s", product_id, exc)
            outcome = ItemOutcome(
                product_id=product_id,
                current_stock=current_stock,
                success=False,
                error=str(exc),
                data=result.data,
            )
            return outcome, self._persist_failure(product_id, current_stock)

        outcome = ItemOutcome(
            product_id=product_id,
            current_stock=current_stock,
            success=True,
            stock_predicted=parsed.stock_predicted,
            risk_level=parsed.risk_level,
            comment=parsed.comment,
            data=result.data,
        )
        report = self._persist(
            PredictionInput(
                product_id=product_id,
                current_stock=current_stock,
                stock_predicted=parsed.stock_predicted,
                risk_level=parsed.risk_level,
                comment=parsed.comment,
                success=True,
            )
        )
        if not report.saved:
            # Parsed fields stay on the outcome; only the flag flips.
            outcome.success = False
            outcome.error = f"Persistence failed: {report.error}"
        return outcome, report

    # ------------------------------------------------------------------
    def _persist_failure(self, product_id: str, current_stock: int) -> PersistenceReport:
        return self._persist(
            PredictionInput(
                product_id=product_id,
                current_stock=current_stock,
                stock_predicted=0,
                risk_level=RiskLevel.MEDIUM,
                success=False,
            )
        )

    def _persist(self, record: PredictionInput) -> PersistenceReport:
        try:
            stored = self.store.upsert(record)
        except ConfigurationError:
            raise
        except Exception as exc:
            LOGGER.exception("Failed to save prediction for %s", record.product_id)
            return PersistenceReport(saved=False, error=str(exc) or exc.__class__.__name__)
        return PersistenceReport(saved=True, record_id=stored.id)
