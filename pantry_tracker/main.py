"""pantry-tracker - pantry items with daily expiration reminders."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from pantry_tracker.core.blob_store import BlobStore, create_blob_store
from pantry_tracker.core.config import settings
from pantry_tracker.core.logging import configure_logfire, instrument_fastapi
from pantry_tracker.core.scheduler import create_scheduler, start_scheduler, stop_scheduler
from pantry_tracker.interface.items_router import router as items_router
from pantry_tracker.interface.notification_platform import ScheduledNotificationPlatform
from pantry_tracker.services.item_store import ItemStore
from pantry_tracker.services.notification_scheduler import NotificationScheduler
from pantry_tracker.services.pantry_service import PantryService


logger = logging.getLogger(__name__)


def create_app(blob_store: BlobStore | None = None) -> FastAPI:
    """Build the application.

    Args:
        blob_store: Store for persisted state; configured from settings when None
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Application lifespan context manager."""
        # Startup
        configure_logfire()

        store = blob_store or create_blob_store()
        scheduler = create_scheduler()
        platform = ScheduledNotificationPlatform(scheduler)
        item_store = ItemStore(store)
        notification_scheduler = NotificationScheduler(
            platform=platform,
            blob_store=store,
            item_store=item_store,
        )

        app.state.blob_store = store
        app.state.scheduler = scheduler
        app.state.notification_platform = platform
        app.state.notification_scheduler = notification_scheduler
        app.state.pantry_service = PantryService(store=item_store, scheduler=notification_scheduler)

        start_scheduler(scheduler)
        if not await notification_scheduler.initialize():
            logger.info("Daily reminder not armed at startup")
        yield
        # Shutdown
        stop_scheduler(scheduler)
        if blob_store is None:
            await store.close()

    app = FastAPI(
        title="pantry-tracker",
        description="Pantry items with daily expiration reminders",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Instrument FastAPI with Logfire
    instrument_fastapi(app)

    app.include_router(items_router)

    @app.get("/health")
    async def health_check() -> JSONResponse:
        """Health check endpoint."""
        return JSONResponse(content={"status": "healthy"}, status_code=200)

    @app.get("/health/storage")
    async def storage_health_check() -> JSONResponse:
        """Blob store status, pinging Redis when it backs the store."""
        store = app.state.blob_store
        health = store.get_health_status() if hasattr(store, "get_health_status") else {}
        connected = await store.ping() if hasattr(store, "ping") else True
        return JSONResponse(
            content={"status": "healthy" if connected else "unavailable", **health, "connected": connected},
            status_code=200 if connected else 503,
        )

    @app.get("/health/notifications")
    async def notifications_health_check() -> JSONResponse:
        """Reminder scheduler status with registered triggers."""
        notification_scheduler: NotificationScheduler = app.state.notification_scheduler
        triggers = app.state.notification_platform.scheduled_triggers()
        # More than one trigger means the single-reminder invariant broke
        healthy = len(triggers) <= 1
        return JSONResponse(
            content={
                "status": "healthy" if healthy else "degraded",
                "state": notification_scheduler.state,
                "triggers": triggers,
            },
            status_code=200 if healthy else 503,
        )

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    uvicorn.run("pantry_tracker.main:app", host=settings.host, port=settings.port)
