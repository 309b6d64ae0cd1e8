"""Process startup and shutdown shared by the API and the scheduler script."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import get_settings
from app.infrastructure.persistence import database
from app.shared.telemetry.telemetry import Telemetry, get_telemetry, set_telemetry

logger = logging.getLogger(__name__)


def setup_telemetry(app: FastAPI | None = None) -> Telemetry | None:
    """Start tracing when telemetry_enabled; app is None for script runs."""
    settings = get_settings()
    if not settings.telemetry_enabled:
        return None
    telemetry = Telemetry.from_settings(settings)
    engine = None
    if settings.database_url:
        database.get_session_factory()
        engine = database.engine
    telemetry.instrument(app=app, engine=engine)
    set_telemetry(telemetry)
    return telemetry


async def shutdown_resources() -> None:
    """Flush spans and dispose the SQL engine."""
    telemetry = get_telemetry()
    if telemetry is not None:
        telemetry.shutdown()
        set_telemetry(None)
    if database.engine is not None:
        await database.engine.dispose()
        logger.info("Database engine disposed")


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_telemetry(app)
    yield
    await shutdown_resources()
