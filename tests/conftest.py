"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from pantry_tracker.core.blob_store import InMemoryBlobStore
from pantry_tracker.domain.item import ItemRecord, SourceKind, to_epoch_ms
from pantry_tracker.services.item_store import ItemStore


DAY_MS = 24 * 60 * 60 * 1000


@pytest.fixture
def fixed_now() -> datetime:
    """Reference instant used instead of the wall clock."""
    return datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


@pytest.fixture
def now_ms(fixed_now: datetime) -> int:
    return to_epoch_ms(fixed_now)


@pytest.fixture
def clock(fixed_now: datetime) -> Callable[[], datetime]:
    """Clock returning a fixed instant that advances 1ms per call.

    Distinct creation instants keep identifiers unique across saves.
    """
    ticks = iter(range(10_000))

    def _now() -> datetime:
        return fixed_now + timedelta(milliseconds=next(ticks))

    return _now


@pytest.fixture
def make_item(now_ms: int) -> Callable[..., ItemRecord]:
    """Factory for item records relative to ``now_ms``.

    ``expires_in_days``/``created_days_ago`` are converted to epoch milliseconds.
    """
    counter = iter(range(1, 10_000))

    def _make(
        title: str,
        *,
        expires_in_days: float | None = None,
        created_days_ago: float = 0,
        scan_code: str | None = None,
        **fields: object,
    ) -> ItemRecord:
        n = next(counter)
        expiration = None if expires_in_days is None else now_ms + int(expires_in_days * DAY_MS)
        return ItemRecord(
            title=title,
            scan_code=scan_code or f"0000000{n:05d}",
            creation_instant=now_ms - int(created_days_ago * DAY_MS) + n,
            expiration_instant=expiration,
            source_kind=fields.pop("source_kind", SourceKind.SCANNED),
            **fields,
        )

    return _make


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    """Provides a fresh in-memory blob store for each test."""
    return InMemoryBlobStore()


@pytest.fixture
def item_store(blob_store: InMemoryBlobStore) -> ItemStore:
    return ItemStore(blob_store)
