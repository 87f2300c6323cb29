"""
Database engine, session factory, and metadata shared across the application.

Nothing here holds a live connection at import time: the API factory builds an
engine and a session factory and keeps them on ``app.state``; services and
repositories receive the ``Session`` they work with explicitly.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
import logging
from typing import Any, Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from ..core.config import settings

logger = logging.getLogger(__name__)

Base: DeclarativeMeta = declarative_base()


def _build_engine_kwargs(db_url: str, echo: bool) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"echo": echo, "future": True}
    if db_url.startswith("sqlite"):
        # Sessions are handed across FastAPI's threadpool; the slot lock and
        # SQLite's own write lock keep writers serialized.
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
    else:
        kwargs.update(pool_pre_ping=True, pool_recycle=300)
    return kwargs


def create_db_engine(
    db_url: Optional[str] = None, *, echo: Optional[bool] = None, **overrides: Any
) -> Engine:
    """
    Create an engine for the reservations store.

    ``overrides`` are passed to ``create_engine`` as is (tests use them to pin
    an in-memory SQLite database to a single connection).
    """
    url = db_url or settings.database_url
    kwargs = _build_engine_kwargs(url, settings.database_echo if echo is None else echo)
    kwargs.update(overrides)
    engine = create_engine(url, **kwargs)

    if url.startswith("sqlite"):

        @event.listens_for(engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    @event.listens_for(engine, "connect")
    def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
        connection_record.info["connect_time"] = datetime.now()
        logger.debug("Database connection established")

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Session for scripts and workers: commit on success, roll back on error."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_dialect_name(db: Session) -> str:
    bind = db.get_bind()
    return bind.dialect.name if bind is not None else ""


def init_db(engine: Engine) -> None:
    """Create all tables (development and tests; production uses Alembic)."""
    from .. import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
