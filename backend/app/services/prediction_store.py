r"""backend/app/services/prediction_store.py

Persistence of prediction records on top of SQLAlchemy.

The store keeps at most one row per product.  ``upsert`` relies on the
database's ``INSERT ... ON CONFLICT (product_id) DO UPDATE`` so concurrent
batch runs cannot lose updates between a lookup and a write.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from sqlalchemy import Engine, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..core.errors import PersistenceError
from ..db.models import Base, PredictionRow, utcnow
from ..db.session import build_engine, build_session_factory
from ..models.schemas import PredictionInput, PredictionRecord, PredictionStats, RiskLevel

LOGGER = logging.getLogger(__name__)

_MUTABLE_FIELDS = ("current_stock", "stock_predicted", "risk_level", "comment", "success", "created_at")


class PredictionStore:
    """CRUD and aggregate queries over the ``predictions`` table."""

    def __init__(self, engine: Engine, session_factory: Optional[sessionmaker[Session]] = None) -> None:
        self.engine = engine
        self.session_factory = session_factory or build_session_factory(engine)

    @classmethod
    def from_url(cls, db_url: str) -> "PredictionStore":
        return cls(build_engine(db_url))

    # ------------------------------------------------------------------
    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            LOGGER.error("Prediction store %s failed: %s", operation, exc)
            raise PersistenceError(f"{operation} failed: {exc}") from exc
        finally:
            session.close()

    def init_schema(self) -> None:
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"schema creation failed: {exc}") from exc

    def ping(self) -> bool:
        try:
            with self.engine.connect() as connection:
                connection.execute(select(1))
        except SQLAlchemyError:
            return False
        return True

    # ------------------------------------------------------------------
    def upsert(self, data: PredictionInput) -> PredictionRecord:
        """Write ``data`` as the product's current prediction and return it."""

        values = data.model_dump()
        values["created_at"] = utcnow()

        with self._session("upsert") as session:
            dialect = session.get_bind().dialect.name
            if dialect in ("sqlite", "postgresql"):
                self._upsert_on_conflict(session, dialect, values)
            else:
                self._upsert_find_then_update(session, values)
            session.flush()
            row = session.scalars(
                select(PredictionRow).where(PredictionRow.product_id == data.product_id)
            ).one()
            return PredictionRecord.model_validate(row)

    @staticmethod
    def _upsert_on_conflict(session: Session, dialect: str, values: dict) -> None:
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        else:
            from sqlalchemy.dialects.sqlite import insert

        statement = insert(PredictionRow).values(**values)
        statement = statement.on_conflict_do_update(
            index_elements=[PredictionRow.product_id],
            set_={field: getattr(statement.excluded, field) for field in _MUTABLE_FIELDS},
        )
        session.execute(statement)

    @staticmethod
    def _upsert_find_then_update(session: Session, values: dict) -> None:
        row = session.scalars(
            select(PredictionRow)
            .where(PredictionRow.product_id == values["product_id"])
            .with_for_update()
        ).first()
        if row is None:
            session.add(PredictionRow(**values))
            return
        for field in _MUTABLE_FIELDS:
            setattr(row, field, values[field])

    # ------------------------------------------------------------------
    def find_latest_by_product(self, product_id: str) -> Optional[PredictionRecord]:
        with self._session("find_latest_by_product") as session:
            row = session.scalars(
                select(PredictionRow)
                .where(PredictionRow.product_id == product_id)
                .order_by(PredictionRow.created_at.desc(), PredictionRow.id.desc())
                .limit(1)
            ).first()
            return PredictionRecord.model_validate(row) if row is not None else None

    def get_all(self, limit: int = 50) -> List[PredictionRecord]:
        """Return stored records, most recently updated first."""

        statement = select(PredictionRow).order_by(PredictionRow.created_at.desc(), PredictionRow.id.desc())
        if limit > 0:
            statement = statement.limit(limit)
        with self._session("get_all") as session:
            return [PredictionRecord.model_validate(row) for row in session.scalars(statement)]

    def get_by_risk(self, risk_level: RiskLevel) -> List[PredictionRecord]:
        with self._session("get_by_risk") as session:
            rows = session.scalars(
                select(PredictionRow)
                .where(PredictionRow.risk_level == risk_level)
                .order_by(PredictionRow.created_at.desc())
            )
            return [PredictionRecord.model_validate(row) for row in rows]

    def count(self, success: Optional[bool] = None) -> int:
        statement = select(func.count(PredictionRow.id))
        if success is not None:
            statement = statement.where(PredictionRow.success == success)
        with self._session("count") as session:
            return int(session.scalar(statement) or 0)

    def group_by_risk_level(self) -> Dict[RiskLevel, int]:
        with self._session("group_by_risk_level") as session:
            rows = session.execute(
                select(PredictionRow.risk_level, func.count(PredictionRow.id)).group_by(PredictionRow.risk_level)
            ).all()
            return {RiskLevel(level): int(count) for level, count in rows}

    def get_stats(self) -> PredictionStats:
        total = self.count()
        successful = self.count(success=True)
        return PredictionStats(
            total=total,
            successful=successful,
            success_rate=(successful / total * 100.0) if total > 0 else 0.0,
            risk_distribution=self.group_by_risk_level(),
        )
