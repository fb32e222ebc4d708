"""Unit tests for rolling window computation."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from calendarhub.ics.window import DEFAULT_TIMEZONE, compute_time_window, resolve_timezone

BRUSSELS = ZoneInfo("Europe/Brussels")


class TestComputeTimeWindow:
    """Test suite for compute_time_window."""

    def test_default_window_bounds(self):
        """Window opens six months back and closes at the end of month +11."""
        now = datetime(2025, 3, 15, 12, 0, tzinfo=BRUSSELS)

        window = compute_time_window(now, BRUSSELS)

        assert window.window_start == datetime(2024, 9, 1, 0, 0, tzinfo=BRUSSELS)
        assert window.window_end.date() == datetime(2026, 2, 28).date()
        assert window.window_end.hour == 23
        assert window.window_end.minute == 59

    def test_year_rollover(self):
        """Months back crossing January land in the previous year."""
        now = datetime(2025, 1, 31, 8, 0, tzinfo=BRUSSELS)

        window = compute_time_window(now, BRUSSELS, months_back=2, months_ahead=1)

        assert window.window_start == datetime(2024, 11, 1, tzinfo=BRUSSELS)
        assert window.window_end.date() == datetime(2025, 1, 31).date()

    def test_now_converted_to_timezone(self):
        """An instant late on the last day in UTC already belongs to the next month locally."""
        now = datetime(2025, 3, 31, 23, 30, tzinfo=timezone.utc)

        window = compute_time_window(now, BRUSSELS, months_back=0, months_ahead=1)

        assert window.window_start == datetime(2025, 4, 1, tzinfo=BRUSSELS)
        assert window.window_end.date() == datetime(2025, 4, 30).date()

    def test_naive_now_taken_as_local(self):
        now = datetime(2025, 6, 10, 10, 0)

        window = compute_time_window(now, BRUSSELS, months_back=1, months_ahead=1)

        assert window.window_start == datetime(2025, 5, 1, tzinfo=BRUSSELS)
        assert window.window_start.tzinfo is BRUSSELS

    def test_contains_overlap(self):
        now = datetime(2025, 3, 15, tzinfo=BRUSSELS)
        window = compute_time_window(now, BRUSSELS, months_back=0, months_ahead=1)

        # Starts before the window but ends inside it
        assert window.contains(
            datetime(2025, 2, 28, 23, 0, tzinfo=BRUSSELS), datetime(2025, 3, 1, 1, 0, tzinfo=BRUSSELS)
        )
        assert not window.contains(
            datetime(2025, 4, 1, 0, 0, tzinfo=BRUSSELS), datetime(2025, 4, 1, 1, 0, tzinfo=BRUSSELS)
        )


class TestResolveTimezone:
    """Test suite for resolve_timezone."""

    def test_known_zone(self):
        assert resolve_timezone("America/New_York") == ZoneInfo("America/New_York")

    @pytest.mark.parametrize("name", [None, "", "Not/AZone"])
    def test_fallback(self, name):
        assert resolve_timezone(name) == ZoneInfo(DEFAULT_TIMEZONE)
