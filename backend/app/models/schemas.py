r"""backend\app\models\schemas.py

Pydantic models used throughout the API.

These models serve as both request payload validators and response
serialisation schemas.  The wire format is camelCase (``productId``,
``stockPredicted``) while Python code uses snake_case attribute names; the
``CamelModel`` base takes care of the mapping.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RiskLevel(str, Enum):
    """Stock-out risk classes emitted by the predictor."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ParsedPrediction(CamelModel):
    """Structured view of one predictor response."""

    stock_predicted: int = Field(0, ge=0, description="Predicted units; 0 when unparsed")
    risk_level: RiskLevel = RiskLevel.MEDIUM
    comment: str = "No additional context"


class PredictionInput(CamelModel):
    """Values written by an upsert."""

    product_id: str = Field(..., min_length=1)
    current_stock: int = Field(..., ge=0)
    stock_predicted: int = Field(0, ge=0)
    risk_level: RiskLevel = RiskLevel.MEDIUM
    comment: Optional[str] = None
    success: bool = False


class PredictionRecord(PredictionInput):
    """A stored prediction; ``created_at`` is refreshed on every upsert."""

    id: int
    created_at: datetime


class PredictionStats(CamelModel):
    total: int = 0
    successful: int = 0
    success_rate: float = Field(0.0, description="Percentage of successful records")
    risk_distribution: Dict[RiskLevel, int] = Field(default_factory=dict)


class ItemOutcome(CamelModel):
    """Result of one prediction attempt inside a batch (or a single call)."""

    product_id: str
    current_stock: int
    success: bool
    error: Optional[str] = None
    stock_predicted: Optional[int] = None
    risk_level: Optional[RiskLevel] = None
    comment: Optional[str] = None
    data: Optional[List[Any]] = Field(None, description="Raw predictor response; None when the call failed")


class PersistenceReport(CamelModel):
    saved: bool
    record_id: Optional[int] = None
    error: Optional[str] = None


class BatchRunSummary(CamelModel):
    timestamp: datetime
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    results: List[ItemOutcome] = Field(default_factory=list)
    execution_time_ms: int = 0
    cancelled: bool = False

    @property
    def success_rate(self) -> float:
        if self.total_requests <= 0:
            return 0.0
        return self.successful_requests / self.total_requests * 100.0

    def top_results(self, limit: int = 10) -> List[ItemOutcome]:
        """Return up to ``limit`` successful, fully parsed outcomes in run order."""

        picked = [
            outcome
            for outcome in self.results
            if outcome.success and outcome.stock_predicted is not None and outcome.risk_level is not None
        ]
        return picked[: max(limit, 0)]


class CompactResult(CamelModel):
    product_id: str
    current_stock: int
    stock_predicted: int
    risk_level: RiskLevel
    success: bool


class BatchSummaryPayload(CamelModel):
    """Compact batch report returned by ``POST /predict-batch``."""

    total_products: int
    successful_predictions: int
    failed_predictions: int
    success_rate: str
    execution_time: str
    execution_time_ms: int
    cancelled: bool
    results: List[CompactResult]
    risk_distribution: Dict[RiskLevel, int] = Field(default_factory=dict)


class BatchResponse(CamelModel):
    success: bool = True
    message: str
    summary: BatchSummaryPayload
    statistics: Optional[PredictionStats] = None


class RiskCounts(BaseModel):
    critical: int = 0
    high: int = Field(0, description="CRITICAL + HIGH, the attention bucket")
    medium: int = 0
    low: int = 0
    all: int = 0
