"""Tests for the expiration window filter."""

import pytest

from pantry_tracker.services.expiration_service import expiring_within, window_days


DAY_MS = 24 * 60 * 60 * 1000


@pytest.mark.unit
class TestExpiringWithin:
    """Tests for selecting items expiring inside the window."""

    def test_three_day_window(self, make_item, now_ms):
        milk = make_item("Milk", expires_in_days=2)
        eggs = make_item("Eggs", expires_in_days=5)
        bread = make_item("Bread", created_days_ago=4)

        assert expiring_within([milk, eggs, bread], now_ms, 3 * DAY_MS) == [milk]

    def test_default_window_is_three_days(self, make_item, now_ms):
        soon = make_item("Milk", expires_in_days=3)
        late = make_item("Eggs", expires_in_days=3.5)

        assert expiring_within([soon, late], now_ms) == [soon]

    def test_boundaries_are_inclusive(self, make_item, now_ms):
        at_now = make_item("Now").with_expiration(now_ms)
        at_horizon = make_item("Horizon").with_expiration(now_ms + DAY_MS)

        assert expiring_within([at_now, at_horizon], now_ms, DAY_MS) == [at_now, at_horizon]

    def test_already_expired_excluded(self, make_item, now_ms):
        expired = make_item("Old milk").with_expiration(now_ms - 1)

        assert expiring_within([expired], now_ms, DAY_MS) == []

    def test_zero_window_only_matches_now(self, make_item, now_ms):
        exact = make_item("Exact").with_expiration(now_ms)
        later = make_item("Later").with_expiration(now_ms + 1)

        assert expiring_within([exact, later], now_ms, 0) == [exact]

    def test_preserves_input_order(self, make_item, now_ms):
        b = make_item("B", expires_in_days=2)
        a = make_item("A", expires_in_days=1)

        assert expiring_within([b, a], now_ms) == [b, a]

    def test_negative_window_rejected(self, now_ms):
        with pytest.raises(ValueError, match="negative"):
            expiring_within([], now_ms, -1)

    def test_window_days(self):
        assert window_days(3 * DAY_MS) == 3
        assert window_days(0) == 0
