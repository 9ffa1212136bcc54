"""Pydantic models for service layer return types.

These models provide type safety at service boundaries, carrying records and
user-facing alerts out of the pantry actions.
"""

from pydantic import BaseModel, Field

from pantry_tracker.core.errors import ErrorResponse
from pantry_tracker.domain.item import ItemRecord


class ProductLookupResult(BaseModel):
    """Product details returned by the barcode lookup collaborator."""

    title: str
    weight_label: str | None = None
    image_reference: str | None = None


class PantryActionResult(BaseModel):
    """Outcome of a user action on the pantry.

    ``items`` is the collection as the user should now see it. On failure it is
    the last known state and ``alert`` describes what went wrong.
    """

    items: list[ItemRecord] = Field(default_factory=list)
    record: ItemRecord | None = None
    alert: ErrorResponse | None = None
    needs_manual_entry: bool = False

    @property
    def ok(self) -> bool:
        return self.alert is None


class IngredientSummary(BaseModel):
    """Ingredient list handed to the recipe-generation collaborator."""

    items_list: str
    expiring_items: str
    item_count: int


class NotificationResult(BaseModel):
    """Result of delivering a notification."""

    success: bool
    message_id: str | None = None
    error: str | None = None
