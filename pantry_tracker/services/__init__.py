from pantry_tracker.services import (
    expiration_service,
    item_store,
    notification_scheduler,
    ordering,
    pantry_service,
)


__all__ = [
    "expiration_service",
    "item_store",
    "notification_scheduler",
    "ordering",
    "pantry_service",
]
