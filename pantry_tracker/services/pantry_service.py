"""Pantry actions: the call sites nearest the user.

Store errors stop here and become user-facing alerts. A failed write leaves
the caller with the last known collection, never a half-applied change.
Every successful item change re-arms the daily reminder so its content
tracks the collection.
"""

import logging
from collections.abc import Callable
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from pantry_tracker.core.config import settings
from pantry_tracker.core.errors import PantryTrackerError, classify_error_with_response
from pantry_tracker.core.logging import span
from pantry_tracker.domain.item import (
    ItemCandidate,
    ItemIdentifier,
    ItemRecord,
    SourceKind,
    expiration_instant_for,
    normalize,
    to_epoch_ms,
)
from pantry_tracker.models.service_models import (
    IngredientSummary,
    PantryActionResult,
    ProductLookupResult,
)
from pantry_tracker.services.item_store import ItemStore
from pantry_tracker.services.notification_scheduler import NotificationScheduler


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class PantryService:
    """User-facing pantry operations."""

    def __init__(
        self,
        *,
        store: ItemStore,
        scheduler: NotificationScheduler,
        clock: Clock = _utc_now,
        expiration_hour: int | None = None,
        timezone: str | None = None,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._clock = clock
        self._expiration_hour = settings.expiration_reminder_hour if expiration_hour is None else expiration_hour
        self._timezone = timezone if timezone is not None else settings.timezone
        # Last successfully loaded/written collection, returned alongside alerts
        self._items: list[ItemRecord] = []

    async def load_items(self) -> PantryActionResult:
        """Load the collection for display; failures surface as an empty list with an alert."""
        with span("pantry_service.load_items"):
            try:
                self._items = await self._store.load_all()
            except Exception as e:
                logger.error("Error loading items: %s", e)
                self._items = []
                return PantryActionResult(items=[], alert=classify_error_with_response(e))

            return PantryActionResult(items=self._items)

    async def save_scanned_item(
        self,
        *,
        scan_code: str,
        product: ProductLookupResult | None,
    ) -> PantryActionResult:
        """Store the product found for a scanned code.

        A missing product (lookup said "not found") stores nothing and asks for
        manual entry instead.
        """
        if product is None:
            logger.info("No product found for scan code %s, falling back to manual entry", scan_code)
            return PantryActionResult(items=self._items, needs_manual_entry=True)

        return await self._save(
            ItemCandidate(
                title=product.title,
                weight_label=product.weight_label,
                image_reference=product.image_reference,
                scan_code=scan_code,
                source_kind=SourceKind.SCANNED,
                creation_instant=self._now_ms(),
            )
        )

    async def save_manual_item(
        self,
        *,
        title: str,
        weight_label: str | None = None,
        inline_image: str | None = None,
    ) -> PantryActionResult:
        """Store a manually entered item."""
        return await self._save(
            ItemCandidate(
                title=title,
                weight_label=weight_label,
                inline_image=inline_image,
                source_kind=SourceKind.MANUAL,
                creation_instant=self._now_ms(),
            )
        )

    async def set_expiration(self, *, identifier: ItemIdentifier, day: date) -> PantryActionResult:
        """Set an item's expiration to the reminder hour of the picked day."""
        instant = expiration_instant_for(day, hour=self._expiration_hour, tz=self._timezone)
        return await self.set_expiration_instant(identifier=identifier, expiration_instant=instant)

    async def set_expiration_instant(
        self,
        *,
        identifier: ItemIdentifier,
        expiration_instant: int | None,
    ) -> PantryActionResult:
        """Set (or clear, with None) an item's expiration instant."""
        with span("pantry_service.set_expiration"):
            try:
                record = await self._store.update(
                    identifier,
                    lambda item: item.with_expiration(expiration_instant),
                )
                self._items = await self._store.load_all()
            except Exception as e:
                logger.error("Error updating expiration for item %s: %s", identifier, e)
                return self._failed(e)

            await self._scheduler.refresh()
            return PantryActionResult(items=self._items, record=record)

    async def delete_item(self, *, identifier: ItemIdentifier) -> PantryActionResult:
        """Delete an item. Deleting an item that is already gone succeeds."""
        with span("pantry_service.delete_item"):
            try:
                removed = await self._store.remove(identifier)
                self._items = await self._store.load_all()
            except Exception as e:
                logger.error("Error deleting item %s: %s", identifier, e)
                return self._failed(e)

            if removed:
                await self._scheduler.refresh()
            return PantryActionResult(items=self._items)

    async def clear_items(self) -> PantryActionResult:
        """Delete every item."""
        with span("pantry_service.clear_items"):
            try:
                await self._store.clear()
            except Exception as e:
                logger.error("Error clearing items: %s", e)
                return self._failed(e)

            self._items = []
            await self._scheduler.refresh()
            return PantryActionResult(items=[])

    async def build_ingredient_list(self, *, prioritize_expiring: bool = True) -> IngredientSummary:
        """Ingredient text for the recipe-generation collaborator.

        With ``prioritize_expiring`` the items keep the store's expiration-first
        order; otherwise they are listed in the order they were added.
        """
        result = await self.load_items()
        items = result.items
        if not prioritize_expiring:
            items = sorted(items, key=lambda item: item.creation_instant)

        zone = ZoneInfo(self._timezone) if self._timezone else None

        def describe(item: ItemRecord) -> str:
            if item.expiration_instant is None:
                return item.title
            expires = datetime.fromtimestamp(item.expiration_instant / 1000, tz=zone).date()
            return f"{item.title} (expires: {expires.isoformat()})"

        return IngredientSummary(
            items_list=", ".join(describe(item) for item in items),
            expiring_items=", ".join(describe(item) for item in items if item.has_expiration),
            item_count=len(items),
        )

    async def _save(self, candidate: ItemCandidate) -> PantryActionResult:
        with span("pantry_service.save_item"):
            try:
                record = normalize(candidate)
                self._items = await self._store.append(record)
            except Exception as e:
                logger.error("Error saving item to storage: %s", e)
                return self._failed(e)

            await self._scheduler.refresh()
            return PantryActionResult(items=self._items, record=record)

    def _failed(self, error: Exception) -> PantryActionResult:
        if not isinstance(error, PantryTrackerError):
            logger.exception("Unexpected pantry error", exc_info=error)
        return PantryActionResult(items=self._items, alert=classify_error_with_response(error))

    def _now_ms(self) -> int:
        return to_epoch_ms(self._clock())
