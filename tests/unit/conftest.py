"""Pytest configuration and fixtures for unit tests."""

import pytest

from pantry_tracker.domain.notification import NotificationTime
from pantry_tracker.services.notification_scheduler import NotificationScheduler
from pantry_tracker.services.pantry_service import PantryService
from tests.unit.mocks import FakeNotificationPlatform


THREE_DAYS_MS = 3 * 24 * 60 * 60 * 1000


@pytest.fixture
def platform() -> FakeNotificationPlatform:
    """Notification platform that grants permission."""
    return FakeNotificationPlatform()


@pytest.fixture
def notification_scheduler(platform, blob_store, item_store, clock) -> NotificationScheduler:
    return NotificationScheduler(
        platform=platform,
        blob_store=blob_store,
        item_store=item_store,
        window_ms=THREE_DAYS_MS,
        default_time=NotificationTime(hour=9, minute=0),
        clock=clock,
    )


@pytest.fixture
def pantry_service(item_store, notification_scheduler, clock) -> PantryService:
    return PantryService(
        store=item_store,
        scheduler=notification_scheduler,
        clock=clock,
        expiration_hour=9,
        timezone="UTC",
    )
