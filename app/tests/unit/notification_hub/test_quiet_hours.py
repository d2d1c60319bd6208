"""Unit tests for quiet-hours evaluation."""

from datetime import datetime, time, timezone

import pytest

from notification_hub.quiet_hours import is_quiet_now, to_user_time


@pytest.mark.unit
class TestIsQuietNowOvernightWindow:
    """Tests for a window that spans midnight (23:00 to 06:00)."""

    @pytest.mark.parametrize(
        "current", [time(23, 0), time(0, 0), time(3, 30), time(5, 59)]
    )
    def test_inside_window_is_quiet(self, quiet_night, current):
        """Test times between start and end (across midnight) are quiet."""
        assert is_quiet_now(*quiet_night, current) is True

    @pytest.mark.parametrize("current", [time(6, 0), time(12, 0), time(22, 59)])
    def test_outside_window_is_not_quiet(self, quiet_night, current):
        """Test end is exclusive and daytime is not quiet."""
        assert is_quiet_now(*quiet_night, current) is False


@pytest.mark.unit
class TestIsQuietNowSameDayWindow:
    """Tests for a window within one day (01:00 to 03:00)."""

    @pytest.mark.parametrize("current", [time(1, 0), time(2, 0), time(2, 59)])
    def test_inside_window_is_quiet(self, current):
        assert is_quiet_now(time(1, 0), time(3, 0), current) is True

    @pytest.mark.parametrize(
        "current", [time(0, 59), time(3, 0), time(12, 0), time(23, 30)]
    )
    def test_outside_window_is_not_quiet(self, current):
        assert is_quiet_now(time(1, 0), time(3, 0), current) is False


@pytest.mark.unit
class TestIsQuietNowEdgeCases:
    """Tests for unset and degenerate windows."""

    def test_unset_start_disables_window(self):
        assert is_quiet_now(None, time(6, 0), time(3, 0)) is False

    def test_unset_end_disables_window(self):
        assert is_quiet_now(time(23, 0), None, time(23, 30)) is False

    def test_equal_bounds_cover_whole_day(self):
        """Test start == end is treated as a window spanning every hour."""
        assert is_quiet_now(time(8, 0), time(8, 0), time(8, 0)) is True
        assert is_quiet_now(time(8, 0), time(8, 0), time(20, 0)) is True

    def test_accepts_aware_datetime(self, quiet_night):
        """Test only the time-of-day of a datetime is compared."""
        now = datetime(2024, 6, 1, 23, 15, tzinfo=timezone.utc)
        assert is_quiet_now(*quiet_night, now) is True

    def test_bounds_with_utc_offset_compare_as_wall_clock(self):
        """Test offset-carrying bounds are compared by time of day only."""
        start = time(23, 0, tzinfo=timezone.utc)
        end = time(6, 0, tzinfo=timezone.utc)

        assert is_quiet_now(start, end, time(0, 0)) is True
        assert is_quiet_now(start, end, time(12, 0)) is False
        assert is_quiet_now(start, end, time(23, 30, tzinfo=timezone.utc)) is True


@pytest.mark.unit
class TestToUserTime:
    """Tests for converting instants into the user's timezone."""

    def test_converts_to_named_timezone(self):
        now = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

        local = to_user_time(now, "America/Toronto")

        assert local.hour == 7
        assert local.utcoffset().total_seconds() == -5 * 3600

    def test_naive_datetime_is_taken_as_utc(self):
        local = to_user_time(datetime(2024, 1, 15, 12, 0), "Europe/Paris")

        assert local.hour == 13

    def test_unknown_timezone_falls_back_to_utc(self):
        now = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

        local = to_user_time(now, "Mars/Olympus_Mons")

        assert local.hour == 12
        assert local.utcoffset().total_seconds() == 0
