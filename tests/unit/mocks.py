"""Test doubles for the notification platform and blob store."""

import asyncio
import itertools
from typing import Any

from pantry_tracker.core.blob_store import InMemoryBlobStore
from pantry_tracker.core.errors import NotificationPlatformError, PermissionDeniedError
from pantry_tracker.domain.notification import NotificationContent, PermissionStatus
from pantry_tracker.models.service_models import NotificationResult


class FakeNotificationPlatform:
    """In-memory notification platform recording every call.

    ``granted`` decides the answer to ``request_permission``; set
    ``fail_scheduling``/``fail_cancel`` to simulate the platform refusing.
    """

    def __init__(self, *, granted: bool = True) -> None:
        self.granted = granted
        self.permission = PermissionStatus.UNDETERMINED
        self.triggers: dict[str, dict[str, Any]] = {}
        self.presented: list[NotificationContent] = []
        self.fail_scheduling = False
        self.fail_cancel = False
        self.cancel_calls = 0
        self.permission_requests = 0
        self._ids = itertools.count(1)

    async def get_permission_status(self) -> PermissionStatus:
        return self.permission

    async def request_permission(self) -> PermissionStatus:
        self.permission_requests += 1
        self.permission = PermissionStatus.GRANTED if self.granted else PermissionStatus.DENIED
        return self.permission

    async def cancel_all(self) -> None:
        self.cancel_calls += 1
        if self.fail_cancel:
            raise NotificationPlatformError("cancel refused")
        self.triggers.clear()

    async def schedule_daily(self, hour: int, minute: int, content: NotificationContent) -> str:
        if self.permission != PermissionStatus.GRANTED:
            raise PermissionDeniedError("not granted")
        if self.fail_scheduling:
            raise NotificationPlatformError("platform refused the trigger")

        trigger_id = f"trigger-{next(self._ids)}"
        self.triggers[trigger_id] = {"hour": hour, "minute": minute, "content": content}
        return trigger_id

    async def present_now(self, content: NotificationContent) -> NotificationResult:
        if self.permission != PermissionStatus.GRANTED:
            raise PermissionDeniedError("not granted")
        self.presented.append(content)
        return NotificationResult(success=True, message_id=f"now-{len(self.presented)}")

    @property
    def only_trigger(self) -> dict[str, Any]:
        assert len(self.triggers) == 1, f"expected exactly one trigger, found {len(self.triggers)}"
        return next(iter(self.triggers.values()))


class YieldingNotificationPlatform(FakeNotificationPlatform):
    """Platform whose cancel suspends, letting other coroutines interleave."""

    async def cancel_all(self) -> None:
        await asyncio.sleep(0)
        await super().cancel_all()


class FailingBlobStore(InMemoryBlobStore):
    """Blob store whose writes (and optionally reads) fail with a connection error."""

    def __init__(self, *, fail_reads: bool = False) -> None:
        super().__init__()
        self.fail_reads = fail_reads
        self.fail_writes = True

    async def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise ConnectionError("storage connection refused")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise ConnectionError("storage connection refused")
        await super().set(key, value)

    async def delete(self, key: str) -> None:
        if self.fail_writes:
            raise ConnectionError("storage connection refused")
        await super().delete(key)
