r"""backend/app/services/batch_service.py

Sequential batch prediction runs.

A run walks the product identifiers in order, calls the single-item pipeline
for each, then waits ``inter_request_delay_ms`` before the next product.
Requests are never fanned out: the remote model is shared and of unknown
capacity, so throughput is traded for a fixed pacing delay.

Runs can be cancelled through a ``threading.Event``; the pacing wait doubles
as the cancellation point, and a cancelled run returns the partial summary
with ``cancelled=True``.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from ..core.observability import record_batch_duration, record_batch_item
from ..models.schemas import (
    BatchRunSummary,
    BatchSummaryPayload,
    CompactResult,
    ItemOutcome,
    RiskLevel,
)
from .prediction_service import PredictionPipeline

LOGGER = logging.getLogger(__name__)

DEFAULT_DELAY_MS = 500

StockGenerator = Callable[[], int]


def random_stock(minimum: int = 1, maximum: int = 100) -> StockGenerator:
    """Return a generator drawing uniform integers in ``[minimum, maximum]``."""

    if minimum > maximum:
        raise ValueError("minimum must not exceed maximum")

    def _generate() -> int:
        return random.randint(minimum, maximum)

    return _generate


class BatchOrchestrator:
    """Drive a :class:`PredictionPipeline` over a list of products."""

    def __init__(self, pipeline: PredictionPipeline) -> None:
        self.pipeline = pipeline
        self._lock = threading.Lock()
        self._active: Optional[threading.Event] = None

    @property
    def running(self) -> bool:
        with self._lock:
            return self._active is not None

    def cancel_active(self) -> bool:
        """Signal the in-flight run to stop; ``False`` when nothing is running."""

        with self._lock:
            if self._active is None:
                return False
            self._active.set()
            return True

    def run_batch(
        self,
        product_ids: Sequence[str],
        current_stock_generator: Optional[StockGenerator] = None,
        inter_request_delay_ms: int = DEFAULT_DELAY_MS,
        cancel_token: Optional[threading.Event] = None,
    ) -> BatchRunSummary:
        generator = current_stock_generator or random_stock()
        cancel = cancel_token or threading.Event()
        delay = max(inter_request_delay_ms, 0) / 1000.0

        with self._lock:
            self._active = cancel
        try:
            return self._run(list(product_ids), generator, delay, cancel)
        finally:
            with self._lock:
                if self._active is cancel:
                    self._active = None

    def _run(
        self,
        product_ids: List[str],
        generator: StockGenerator,
        delay: float,
        cancel: threading.Event,
    ) -> BatchRunSummary:
        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()
        results: List[ItemOutcome] = []
        successful = 0
        failed = 0
        cancelled = False

        LOGGER.info("Starting batch prediction for %d products", len(product_ids))

        for index, product_id in enumerate(product_ids, start=1):
            if cancel.is_set():
                cancelled = True
                break

            current_stock = generator()
            outcome, _ = self.pipeline.predict_and_store(product_id, current_stock)
            results.append(outcome)

            if outcome.success:
                successful += 1
                record_batch_item("success")
                LOGGER.info(
                    "[%d/%d] %s: stock=%d predicted=%s risk=%s",
                    index,
                    len(product_ids),
                    product_id,
                    current_stock,
                    outcome.stock_predicted,
                    outcome.risk_level.value if outcome.risk_level else None,
                )
            else:
                failed += 1
                record_batch_item("failure")
                LOGGER.warning("[%d/%d] %s failed: %s", index, len(product_ids), product_id, outcome.error)

            # Pacing; returns early when the run is cancelled.
            if delay > 0 and cancel.wait(delay):
                cancelled = index < len(product_ids)
                break

        elapsed = time.perf_counter() - start
        record_batch_duration(elapsed)

        summary = BatchRunSummary(
            timestamp=started_at,
            total_requests=successful + failed,
            successful_requests=successful,
            failed_requests=failed,
            results=results,
            execution_time_ms=int(elapsed * 1000),
            cancelled=cancelled,
        )
        LOGGER.info(
            "Batch finished%s: %d/%d successful (%.2f%%) in %.2fs",
            " (cancelled)" if cancelled else "",
            summary.successful_requests,
            summary.total_requests,
            summary.success_rate,
            elapsed,
        )
        return summary


def compact_summary(
    summary: BatchRunSummary,
    risk_distribution: Optional[Dict[RiskLevel, int]] = None,
    top_results: int = 10,
) -> BatchSummaryPayload:
    """Shape a run summary into the compact report returned to HTTP callers."""

    compact = [
        CompactResult(
            product_id=outcome.product_id,
            current_stock=outcome.current_stock,
            stock_predicted=outcome.stock_predicted or 0,
            risk_level=outcome.risk_level or RiskLevel.MEDIUM,
            success=outcome.success,
        )
        for outcome in summary.top_results(top_results)
    ]
    return BatchSummaryPayload(
        total_products=summary.total_requests,
        successful_predictions=summary.successful_requests,
        failed_predictions=summary.failed_requests,
        success_rate=f"{summary.success_rate:.2f}%",
        execution_time=f"{summary.execution_time_ms / 1000:g} seconds",
        execution_time_ms=summary.execution_time_ms,
        cancelled=summary.cancelled,
        results=compact,
        risk_distribution=dict(risk_distribution or {}),
    )
