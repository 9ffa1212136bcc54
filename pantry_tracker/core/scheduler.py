"""Scheduler runtime hosting the daily reminder trigger."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from pantry_tracker.core.config import settings


logger = logging.getLogger(__name__)


def create_scheduler(timezone: str | None = None) -> AsyncIOScheduler:
    """Create an asyncio scheduler in the configured timezone (local zone when unset)."""
    timezone = timezone or settings.timezone
    if timezone:
        return AsyncIOScheduler(timezone=timezone)
    return AsyncIOScheduler()


def start_scheduler(scheduler: AsyncIOScheduler) -> None:
    """Start the scheduler.

    This should be called during FastAPI app startup. Jobs registered before
    startup stay pending and are armed once the scheduler runs.
    """
    if scheduler.running:
        return

    logger.info("Starting scheduler")
    scheduler.start()
    logger.info("Scheduler started successfully")


def stop_scheduler(scheduler: AsyncIOScheduler) -> None:
    """Stop the scheduler.

    This should be called during FastAPI app shutdown.
    """
    if not scheduler.running:
        return

    logger.info("Stopping scheduler")
    scheduler.shutdown(wait=False)
    logger.info("Scheduler stopped")
