"""geonudge - proximity-aware reminders driven by pushed position fixes."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.logging import configure_logfire, instrument_fastapi
from src.core.storage import SQLiteKeyValueStore
from src.interface.api_router import router as api_router
from src.interface.position_feed import PushPositionFeed
from src.services.reminder_engine import build_engine


logger = logging.getLogger(__name__)


def log_startup_configuration() -> None:
    """Report optional integrations that are switched off."""
    if not settings.notification_url:
        logger.warning("startup_validation", extra={"service": "notifications", "status": "disabled"})
    if not settings.geocoding_enabled:
        logger.info("startup_validation", extra={"service": "geocoder", "status": "disabled"})
    if not settings.location_permission_granted:
        logger.warning("startup_validation", extra={"service": "location", "status": "denied"})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    # Configure logging first so startup logs are captured
    configure_logfire()
    log_startup_configuration()

    storage = SQLiteKeyValueStore()
    feed = PushPositionFeed(permission_granted=settings.location_permission_granted)
    engine = build_engine(storage=storage, feed=feed)
    await engine.start()
    logger.info("Reminder engine ready", extra={"geofencing_available": engine.geofencing_available})

    app.state.storage = storage
    app.state.feed = feed
    app.state.engine = engine
    yield
    # Shutdown
    await engine.stop()
    await storage.close()


app = FastAPI(
    title="geonudge",
    description="Proximity-aware reminders",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(api_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    engine = getattr(app.state, "engine", None)
    geofencing_available = engine.geofencing_available if engine is not None else False
    return JSONResponse(
        content={"status": "healthy", "geofencing_available": geofencing_available},
        status_code=200,
    )
