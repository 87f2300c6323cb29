# campus_reservations/main.py
"""
FastAPI application factory.

The engine, session factory, booking policy and slot locker are built once
per application and kept on ``app.state``; routes reach them through the
dependencies in ``api.dependencies``.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from . import __version__
from .core.booking_lock import SlotLocker, default_slot_locker
from .core.config import Settings, settings as default_settings
from .core.exceptions import DomainException
from .database import create_db_engine, create_session_factory, init_db
from .domain.decisions import BookingPolicy
from .routes import admin, bookings, health, resources

logging.basicConfig(
    level=default_settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_TITLE = "Campus Reservations API"
API_DESCRIPTION = "Book rooms, labs and equipment; review and manage bookings and schedules."


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def _domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        http_exc = exc.to_http_exception()
        return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


def create_app(
    app_settings: Optional[Settings] = None,
    *,
    engine: Optional[Engine] = None,
    slot_locker: Optional[SlotLocker] = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        app_settings: Settings to use; defaults to the process settings
        engine: Pre-built engine (tests); otherwise one is created from settings
        slot_locker: Locker shared by all booking services of this app
    """
    cfg = app_settings or default_settings
    owns_engine = engine is None
    if engine is None:
        engine = create_db_engine(cfg.database_url, echo=cfg.database_echo)
        if cfg.is_sqlite:
            # Development convenience; PostgreSQL schemas come from Alembic.
            init_db(engine)

    @asynccontextmanager
    async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(
            f"Starting {API_TITLE} {__version__} ({cfg.environment}), "
            f"initial booking status={cfg.initial_booking_status}"
        )
        yield
        if owns_engine:
            engine.dispose()
        logger.info(f"Stopped {API_TITLE}")

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=app_lifespan,
    )
    app.state.settings = cfg
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.booking_policy = BookingPolicy.from_settings(cfg)
    app.state.slot_locker = slot_locker or default_slot_locker()

    register_error_handlers(app)

    app.include_router(health.router, prefix="/api")
    app.include_router(bookings.router, prefix="/api")
    app.include_router(resources.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")

    return app
