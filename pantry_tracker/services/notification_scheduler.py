"""Daily expiration reminder scheduler.

Owns at most one recurring trigger on the notification platform. Re-arming is
always cancel-everything-then-schedule, never an in-place patch.

Notification content is computed from the collection at the moment the
trigger is armed, not when it fires. Item changes call ``refresh()`` to
re-arm with fresh content, which narrows but does not remove that staleness
window.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from pantry_tracker.core.blob_store import BlobStore
from pantry_tracker.core.config import Constants, settings
from pantry_tracker.core.errors import PermissionDeniedError, StoreCorruptError
from pantry_tracker.core.logging import span
from pantry_tracker.domain.item import ItemRecord, to_epoch_ms
from pantry_tracker.domain.notification import (
    NotificationContent,
    NotificationTime,
    PermissionStatus,
    SchedulerState,
)
from pantry_tracker.interface.notification_platform import NotificationPlatform
from pantry_tracker.services.expiration_service import expiring_within, window_days
from pantry_tracker.services.item_store import ItemStore


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


def build_notification_body(expiring_items: Sequence[ItemRecord], *, window_days: int) -> str:
    """Reminder body for the given expiring items."""
    count = len(expiring_items)
    if count == 0:
        return f"No items expiring in the next {window_days} days!"
    if count == 1:
        return f"{expiring_items[0].title} expires in the next {window_days} days!"

    others = count - 1
    suffix = "s" if others > 1 else ""
    return (
        f"{count} items expiring in the next {window_days} days: "
        f"{expiring_items[0].title} and {others} other{suffix}"
    )


def build_notification_content(
    expiring_items: Sequence[ItemRecord],
    *,
    window_days: int,
    reminder_type: str = Constants.DAILY_REMINDER_TYPE,
) -> NotificationContent:
    """Full reminder notification for the given expiring items."""
    return NotificationContent(
        title=Constants.NOTIFICATION_TITLE,
        body=build_notification_body(expiring_items, window_days=window_days),
        data={"type": reminder_type, "expiringCount": len(expiring_items)},
    )


class NotificationScheduler:
    """Keeps exactly one daily reminder armed at the user's chosen time."""

    def __init__(
        self,
        *,
        platform: NotificationPlatform,
        blob_store: BlobStore,
        item_store: ItemStore,
        window_ms: int | None = None,
        default_time: NotificationTime | None = None,
        clock: Clock = _utc_now,
        key: str = Constants.NOTIFICATION_TIME_KEY,
        timezone: str | None = None,
    ) -> None:
        self._platform = platform
        self._blob_store = blob_store
        self._item_store = item_store
        self._window_ms = settings.expiration_window_ms if window_ms is None else window_ms
        self._default_time = default_time or NotificationTime(
            hour=settings.default_notification_hour,
            minute=settings.default_notification_minute,
        )
        self._clock = clock
        self._key = key
        # Same zone the platform's daily triggers fire in; None is the host zone
        tz_name = timezone if timezone is not None else settings.timezone
        self._zone = ZoneInfo(tz_name) if tz_name else None
        self._state = SchedulerState.DISARMED
        self._armed_time: NotificationTime | None = None
        self._trigger_id: str | None = None
        self._arm_lock = asyncio.Lock()

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def armed_time(self) -> NotificationTime | None:
        return self._armed_time

    @property
    def trigger_id(self) -> str | None:
        return self._trigger_id

    @property
    def window_days(self) -> int:
        return window_days(self._window_ms)

    async def request_permission(self) -> bool:
        """Obtain the platform grant. Returns True when notifications are allowed."""
        try:
            status = await self._platform.get_permission_status()
            if status != PermissionStatus.GRANTED:
                status = await self._platform.request_permission()
        except Exception:
            logger.exception("Error requesting notification permissions")
            return False

        return status == PermissionStatus.GRANTED

    async def initialize(self) -> bool:
        """Arm the reminder at the persisted time (09:00 when none is stored).

        A denied permission leaves the scheduler disarmed without raising.

        Returns:
            True if the reminder is armed
        """
        with span("notification_scheduler.initialize"):
            if not await self.request_permission():
                logger.info("Notification permissions not granted")
                return False

            try:
                time_of_day = await self.load_notification_time()
            except Exception:
                logger.exception("Error loading notification time")
                return False

            armed = await self._rearm(time_of_day)
            if armed:
                logger.info("Notifications initialized successfully")
            return armed

    async def reschedule(self, hour: int, minute: int) -> bool:
        """Persist a new reminder time and re-arm the single trigger.

        The time is saved before the platform is touched, so a failed
        cancel or arm still leaves the user's choice in place.

        Returns:
            True if the reminder is armed at the new time

        Raises:
            ValueError: If hour or minute is out of range
        """
        time_of_day = NotificationTime(hour=hour, minute=minute)

        with span("notification_scheduler.reschedule"):
            async with self._arm_lock:
                try:
                    await self._save_notification_time(time_of_day)
                except Exception:
                    logger.exception("Error saving notification time %s", time_of_day)
                    return False

                armed = await self._cancel() and await self._arm(time_of_day)

            if armed:
                logger.info("Notifications rescheduled successfully")
            else:
                logger.error("Failed to reschedule notifications")
            return armed

    async def refresh(self) -> bool:
        """Re-arm at the current time so the content reflects the collection now.

        Returns:
            True if re-armed, False if disarmed or re-arming failed
        """
        with span("notification_scheduler.refresh"):
            async with self._arm_lock:
                # Read under the lock so a concurrent reschedule's new time wins
                time_of_day = self._armed_time
                if self._state != SchedulerState.ARMED or time_of_day is None:
                    return False

                if not await self._cancel():
                    return False
                return await self._arm(time_of_day)

    async def cancel(self) -> bool:
        """Tear down the reminder, leaving the scheduler disarmed."""
        async with self._arm_lock:
            return await self._cancel()

    async def current_content(self, *, reminder_type: str = Constants.DAILY_REMINDER_TYPE) -> NotificationContent:
        """Reminder content computed from the collection as of now."""
        try:
            items = await self._item_store.load_all()
        except StoreCorruptError as e:
            logger.warning("Treating corrupt collection as empty for notification content: %s", e)
            items = []

        expiring = expiring_within(items, to_epoch_ms(self._clock()), self._window_ms)
        return build_notification_content(expiring, window_days=self.window_days, reminder_type=reminder_type)

    async def send_test_notification(self) -> bool:
        """Present the current reminder immediately."""
        try:
            content = await self.current_content(reminder_type=Constants.TEST_REMINDER_TYPE)
            result = await self._platform.present_now(content)
        except PermissionDeniedError:
            logger.info("Test notification skipped: permission not granted")
            return False
        except Exception:
            logger.exception("Error sending test notification")
            return False

        if result.success:
            logger.info("Test notification sent")
        return result.success

    def next_fire_time(self, now: datetime | None = None) -> datetime | None:
        """Next time the armed reminder fires, or None when disarmed."""
        if self._state != SchedulerState.ARMED or self._armed_time is None:
            return None
        moment = now or self._clock().astimezone(self._zone)
        return self._armed_time.next_occurrence(moment)

    async def load_notification_time(self) -> NotificationTime:
        """Persisted reminder time, or the default when none is stored or it is unreadable."""
        raw = await self._blob_store.get(self._key)
        if raw is None:
            return self._default_time

        try:
            return NotificationTime.decode(raw, zone=self._zone)
        except ValueError as e:
            logger.warning("Stored notification time is corrupt (%s); using %s", e, self._default_time)
            return self._default_time

    async def _save_notification_time(self, time_of_day: NotificationTime) -> None:
        today: date = self._clock().astimezone(self._zone).date()
        await self._blob_store.set(self._key, time_of_day.encode(today=today))

    async def _rearm(self, time_of_day: NotificationTime) -> bool:
        async with self._arm_lock:
            if not await self._cancel():
                return False
            return await self._arm(time_of_day)

    async def _cancel(self) -> bool:
        try:
            await self._platform.cancel_all()
        except Exception:
            logger.exception("Error cancelling scheduled notifications")
            return False

        self._state = SchedulerState.DISARMED
        self._armed_time = None
        self._trigger_id = None
        return True

    async def _arm(self, time_of_day: NotificationTime) -> bool:
        try:
            status = await self._platform.get_permission_status()
            if status != PermissionStatus.GRANTED:
                logger.info("Not arming daily reminder: notification permission %s", status)
                return False

            content = await self.current_content()
            trigger_id = await self._platform.schedule_daily(time_of_day.hour, time_of_day.minute, content)
        except PermissionDeniedError:
            logger.info("Not arming daily reminder: permission denied by platform")
            return False
        except Exception:
            logger.exception("Error creating daily notification task")
            return False

        self._state = SchedulerState.ARMED
        self._armed_time = time_of_day
        self._trigger_id = trigger_id
        logger.info("Daily notification scheduled for %s", time_of_day)
        return True
