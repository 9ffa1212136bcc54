"""Domain models and DTOs."""

from pantry_tracker.domain.item import ItemCandidate, ItemIdentifier, ItemRecord, SourceKind, normalize
from pantry_tracker.domain.notification import (
    NotificationContent,
    NotificationTime,
    PermissionStatus,
    SchedulerState,
)


__all__ = [
    "ItemCandidate",
    "ItemIdentifier",
    "ItemRecord",
    "NotificationContent",
    "NotificationTime",
    "PermissionStatus",
    "SchedulerState",
    "SourceKind",
    "normalize",
]
