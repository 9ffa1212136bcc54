"""Notification schedule domain models and enums."""

import json
from datetime import date, datetime, time, timedelta, tzinfo
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SchedulerState(StrEnum):
    """Whether the daily reminder trigger is registered."""

    DISARMED = "disarmed"
    ARMED = "armed"


class PermissionStatus(StrEnum):
    """Notification permission as reported by the platform."""

    GRANTED = "granted"
    DENIED = "denied"
    UNDETERMINED = "undetermined"


class NotificationTime(BaseModel):
    """Time of day for the daily reminder."""

    model_config = ConfigDict(frozen=True)

    hour: int = Field(..., ge=0, le=23)
    minute: int = Field(..., ge=0, le=59)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def encode(self, *, today: date) -> str:
        """Serialize as a JSON ISO datetime on ``today``; only hour and minute matter."""
        return json.dumps(datetime.combine(today, time(self.hour, self.minute)).isoformat())

    @classmethod
    def decode(cls, raw: str, *, zone: tzinfo | None = None) -> "NotificationTime":
        """Parse a persisted value.

        Timezone-aware values are converted to ``zone`` first (the host zone when None).

        Raises:
            ValueError: If the value is not a JSON-encoded ISO datetime
        """
        value = json.loads(raw)
        if not isinstance(value, str):
            raise ValueError(f"Expected an ISO datetime string, got {type(value).__name__}")

        moment = datetime.fromisoformat(value)
        if moment.tzinfo is not None:
            moment = moment.astimezone(zone)
        return cls(hour=moment.hour, minute=moment.minute)

    def next_occurrence(self, now: datetime) -> datetime:
        """Next moment this time of day occurs: today if still ahead, else tomorrow."""
        candidate = now.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)
        if candidate <= now:
            candidate += timedelta(days=1)
        return candidate


class NotificationContent(BaseModel):
    """Title, body and payload of a reminder notification."""

    title: str = Field(..., description="Notification title")
    body: str = Field(..., description="Notification body")
    data: dict[str, Any] = Field(default_factory=dict, description="Payload delivered with the notification")
