"""Expiration window evaluation."""

from collections.abc import Iterable

from pantry_tracker.core.config import Constants
from pantry_tracker.domain.item import ItemRecord


def expiring_within(
    items: Iterable[ItemRecord],
    now_ms: int,
    window_ms: int = Constants.DEFAULT_EXPIRATION_WINDOW_MS,
) -> list[ItemRecord]:
    """Items whose expiration lies in the closed interval [now, now + window].

    Items without an expiration are excluded. Input order is preserved.

    Args:
        items: Items to evaluate
        now_ms: Reference instant in epoch milliseconds
        window_ms: Lookahead duration in milliseconds (default 3 days)

    Returns:
        The expiring subset

    Raises:
        ValueError: If window_ms is negative
    """
    if window_ms < 0:
        raise ValueError(f"Expiration window must not be negative, got {window_ms}")

    horizon = now_ms + window_ms
    return [
        item
        for item in items
        if item.expiration_instant is not None and now_ms <= item.expiration_instant <= horizon
    ]


def window_days(window_ms: int) -> int:
    """Whole days covered by a window, for notification copy."""
    return window_ms // Constants.MS_PER_DAY
