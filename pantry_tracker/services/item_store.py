"""Persistent store for the pantry item collection.

The collection lives in one serialized blob under one key. Every mutation is a
full read, modify, re-sort, full write pass; nothing patches the blob
partially. Mutations on a store instance are serialized through a single
writer lock, so concurrent actions cannot silently drop each other's writes.
"""

import asyncio
import json
import logging
from collections.abc import Callable

from pydantic import ValidationError as PydanticValidationError

from pantry_tracker.core.blob_store import BlobStore
from pantry_tracker.core.config import Constants
from pantry_tracker.core.errors import (
    DuplicateIdentifierError,
    NotFoundError,
    StoreCorruptError,
    ValidationError,
)
from pantry_tracker.core.logging import log_with_context, span
from pantry_tracker.domain.item import ItemIdentifier, ItemRecord
from pantry_tracker.services.ordering import sort_items


logger = logging.getLogger(__name__)

ItemMutator = Callable[[ItemRecord], ItemRecord]


class ItemStore:
    """Sole owner of the serialized item collection."""

    def __init__(self, blob_store: BlobStore, *, key: str = Constants.ITEMS_KEY) -> None:
        self._blob_store = blob_store
        self._key = key
        self._write_lock = asyncio.Lock()

    @property
    def key(self) -> str:
        return self._key

    async def load_all(self) -> list[ItemRecord]:
        """Read the collection.

        Returns:
            Items in policy order; empty if nothing has been stored yet

        Raises:
            StoreCorruptError: If the stored blob is not a list of item records
        """
        with span("item_store.load_all"):
            raw = await self._blob_store.get(self._key)
            if raw is None:
                return []

            try:
                payload = json.loads(raw)
            except json.JSONDecodeError as e:
                raise StoreCorruptError(self._key, f"invalid JSON ({e.msg})") from e

            if not isinstance(payload, list):
                raise StoreCorruptError(self._key, f"expected a list, got {type(payload).__name__}")

            try:
                items = [ItemRecord.model_validate(entry) for entry in payload]
            except PydanticValidationError as e:
                raise StoreCorruptError(self._key, f"{e.error_count()} invalid field(s)") from e

            logger.debug("Loaded %d items from %s", len(items), self._key)
            return items

    async def append(self, record: ItemRecord) -> list[ItemRecord]:
        """Add a record to the collection.

        Returns:
            The collection as written

        Raises:
            DuplicateIdentifierError: If a record with the same identifier exists
            StoreCorruptError: If the stored blob cannot be read
        """
        with span("item_store.append"):
            async with self._write_lock:
                items = await self.load_all()
                if any(item.identifier == record.identifier for item in items):
                    raise DuplicateIdentifierError(f"Item {record.identifier} already exists")

                items.append(record)
                written = await self._write(items)

            log_with_context(logger, "info", "Added item", title=record.title, identifier=str(record.identifier))
            return written

    async def update(self, identifier: ItemIdentifier, mutator: ItemMutator) -> ItemRecord:
        """Replace a record with the result of ``mutator(record)``.

        Returns:
            The updated record

        Raises:
            NotFoundError: If no record has this identifier
            ValidationError: If the mutator changed the record's identity
            StoreCorruptError: If the stored blob cannot be read
        """
        with span("item_store.update"):
            async with self._write_lock:
                items = await self.load_all()
                index = next((i for i, item in enumerate(items) if item.identifier == identifier), None)
                if index is None:
                    raise NotFoundError(f"Item {identifier} not found")

                updated = mutator(items[index])
                if updated.identifier != identifier:
                    raise ValidationError(f"Updating item {identifier} must not change its identity")

                items[index] = updated
                await self._write(items)

            log_with_context(logger, "info", "Updated item", title=updated.title, identifier=str(identifier))
            return updated

    async def remove(self, identifier: ItemIdentifier) -> bool:
        """Remove a record. Removing an absent identifier is a no-op.

        Returns:
            True if a record was removed, False if it was not present
        """
        with span("item_store.remove"):
            async with self._write_lock:
                items = await self.load_all()
                remaining = [item for item in items if item.identifier != identifier]
                if len(remaining) == len(items):
                    logger.debug("Item %s not present, nothing removed", identifier)
                    return False

                await self._write(remaining)

            log_with_context(logger, "info", "Removed item", identifier=str(identifier))
            return True

    async def clear(self) -> None:
        """Remove the whole collection."""
        with span("item_store.clear"):
            async with self._write_lock:
                await self._blob_store.delete(self._key)
            logger.info("Cleared all items from %s", self._key)

    async def _write(self, items: list[ItemRecord]) -> list[ItemRecord]:
        ordered = sort_items(items)
        await self._blob_store.set(self._key, json.dumps([item.to_blob() for item in ordered]))
        return ordered
