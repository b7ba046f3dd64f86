r"""backend/app/db/session.py

Engine and session factory construction."""

from __future__ import annotations

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


def build_engine(db_url: str, echo: bool = False) -> Engine:
    """Create an engine for ``db_url``.

    SQLite connections are shared with FastAPI's worker threads, and an
    in-memory database keeps a single connection so every session sees the
    same tables.
    """

    if db_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, echo=echo, **kwargs)

    return create_engine(db_url, echo=echo, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    # expire_on_commit disabled so rows stay readable after commit()
    return sessionmaker(bind=engine, expire_on_commit=False)
