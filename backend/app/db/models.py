r"""backend/app/db/models.py

SQLAlchemy table definitions for persisted predictions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..models.schemas import RiskLevel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class PredictionRow(Base):
    """Current prediction for one product.

    ``product_id`` is unique: a new prediction overwrites the row in place and
    refreshes ``created_at``, which therefore means "last updated".
    """

    __tablename__ = "predictions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    current_stock: Mapped[int] = mapped_column(Integer, nullable=False)
    stock_predicted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    risk_level: Mapped[RiskLevel] = mapped_column(
        Enum(RiskLevel, name="risk_level"), nullable=False, default=RiskLevel.MEDIUM, index=True
    )
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return (
            f"<PredictionRow(product_id={self.product_id}, "
            f"stock_predicted={self.stock_predicted}, risk_level={self.risk_level}, "
            f"success={self.success})>"
        )
