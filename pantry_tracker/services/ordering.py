"""Ordering policy shared by storage layout and display.

Items with a known expiration come first, soonest first. Items without one
follow, oldest scan first. Sorting is stable, so ties keep input order.
"""

from collections.abc import Iterable

from pantry_tracker.domain.item import ItemRecord


def sort_key(item: ItemRecord) -> tuple[int, int]:
    """Key realizing the ordering policy."""
    if item.expiration_instant is not None:
        return (0, item.expiration_instant)
    return (1, item.creation_instant)


def compare(a: ItemRecord, b: ItemRecord) -> int:
    """Three-way comparison: negative if ``a`` sorts first, 0 if equivalent."""
    key_a, key_b = sort_key(a), sort_key(b)
    return (key_a > key_b) - (key_a < key_b)


def sort_items(items: Iterable[ItemRecord]) -> list[ItemRecord]:
    """Return items in policy order."""
    return sorted(items, key=sort_key)
