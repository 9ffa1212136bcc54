"""Notification platform: permission state plus recurring daily triggers."""

import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, Protocol

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger

from pantry_tracker.core.config import Constants, settings
from pantry_tracker.core.errors import NotificationPlatformError, PermissionDeniedError
from pantry_tracker.domain.notification import NotificationContent, PermissionStatus
from pantry_tracker.interface import push_sender
from pantry_tracker.models.service_models import NotificationResult


logger = logging.getLogger(__name__)

Deliver = Callable[[NotificationContent], Awaitable[NotificationResult]]


class NotificationPlatform(Protocol):
    """Primitives the notification scheduler is built on."""

    async def cancel_all(self) -> None: ...

    async def schedule_daily(self, hour: int, minute: int, content: NotificationContent) -> str: ...

    async def request_permission(self) -> PermissionStatus: ...

    async def get_permission_status(self) -> PermissionStatus: ...

    async def present_now(self, content: NotificationContent) -> NotificationResult: ...


async def deliver_push(content: NotificationContent) -> NotificationResult:
    """Default delivery: hand the notification to the push webhook."""
    return await push_sender.send_push_notification(title=content.title, body=content.body, data=content.data)


class ScheduledNotificationPlatform:
    """Notification platform backed by APScheduler cron jobs.

    Each daily trigger is one job whose id carries the reminder prefix; only
    those jobs are touched by ``cancel_all``.
    """

    def __init__(
        self,
        scheduler: BaseScheduler,
        *,
        deliver: Deliver = deliver_push,
        notifications_enabled: bool | None = None,
        timezone: str | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._deliver = deliver
        self._enabled = settings.notifications_enabled if notifications_enabled is None else notifications_enabled
        self._timezone = timezone if timezone is not None else settings.timezone
        self._permission = PermissionStatus.UNDETERMINED

    async def get_permission_status(self) -> PermissionStatus:
        return self._permission

    async def request_permission(self) -> PermissionStatus:
        """Ask for permission; the answer is fixed by configuration."""
        if self._permission == PermissionStatus.UNDETERMINED:
            self._permission = PermissionStatus.GRANTED if self._enabled else PermissionStatus.DENIED
            logger.info("Notification permission %s", self._permission)
        return self._permission

    def _reminder_jobs(self) -> list[Any]:
        prefix = Constants.DAILY_REMINDER_JOB_PREFIX
        return [job for job in self._scheduler.get_jobs() if job.id.startswith(prefix)]

    async def cancel_all(self) -> None:
        """Remove every registered reminder trigger. Idempotent."""
        try:
            for job in self._reminder_jobs():
                self._scheduler.remove_job(job.id)
                logger.debug("Cancelled reminder job %s", job.id)
        except Exception as e:
            raise NotificationPlatformError(f"Failed to cancel reminder jobs: {e}") from e

    async def schedule_daily(self, hour: int, minute: int, content: NotificationContent) -> str:
        """Register a trigger firing every day at ``hour``:``minute``.

        Returns:
            The job id of the new trigger

        Raises:
            PermissionDeniedError: If permission has not been granted
            NotificationPlatformError: If the scheduler rejects the job
        """
        if self._permission != PermissionStatus.GRANTED:
            raise PermissionDeniedError(f"Cannot schedule notifications: permission {self._permission}")

        job_id = f"{Constants.DAILY_REMINDER_JOB_PREFIX}:{uuid.uuid4().hex}"
        try:
            trigger = CronTrigger(hour=hour, minute=minute, timezone=self._timezone)
            self._scheduler.add_job(
                self._fire,
                trigger=trigger,
                args=[content],
                id=job_id,
                name="Daily Pantry Reminder",
            )
        except Exception as e:
            raise NotificationPlatformError(f"Failed to schedule daily reminder: {e}") from e

        logger.info("Scheduled daily reminder job %s at %02d:%02d", job_id, hour, minute)
        return job_id

    async def present_now(self, content: NotificationContent) -> NotificationResult:
        """Deliver a notification immediately."""
        if self._permission != PermissionStatus.GRANTED:
            raise PermissionDeniedError(f"Cannot present notification: permission {self._permission}")
        return await self._deliver(content)

    def scheduled_triggers(self, now: datetime | None = None) -> list[dict[str, Any]]:
        """Describe registered reminder triggers."""
        triggers = []
        for job in self._reminder_jobs():
            next_run = job.trigger.get_next_fire_time(None, now or datetime.now(job.trigger.timezone))
            triggers.append(
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run": next_run.isoformat() if next_run else None,
                }
            )
        return triggers

    async def _fire(self, content: NotificationContent) -> None:
        try:
            result = await self._deliver(content)
        except Exception:
            logger.exception("Error delivering daily reminder")
            return

        if not result.success:
            logger.warning("Daily reminder delivery failed: %s", result.error)
