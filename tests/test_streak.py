"""
Tests for the daily visit streak arithmetic.
"""

from datetime import date, timedelta

from moodverse.streak import StreakUpdate, advance

TODAY = date(2026, 3, 1)


class TestAdvance:
    """Boundary cases for streak updates."""

    def test_first_visit(self):
        """No previous visit starts the streak at 1."""
        assert advance(None, TODAY, 0) == StreakUpdate(1, TODAY)

    def test_consecutive_day_increments(self):
        """A visit the day after the last one extends the streak."""
        assert advance(TODAY - timedelta(days=1), TODAY, 4) == StreakUpdate(5, TODAY)

    def test_consecutive_day_across_month_boundary(self):
        """Calendar arithmetic, not day-of-month arithmetic."""
        # 2026 is not a leap year, so Feb 28 is the day before Mar 1.
        assert advance(date(2026, 2, 28), TODAY, 9) == StreakUpdate(10, TODAY)

    def test_same_day_changes_nothing(self):
        """A repeat visit on the same day leaves both values alone."""
        assert advance(TODAY, TODAY, 3) == StreakUpdate(3, TODAY)

    def test_two_day_gap_resets(self):
        """Missing a whole day resets the streak."""
        assert advance(TODAY - timedelta(days=2), TODAY, 12) == StreakUpdate(1, TODAY)

    def test_long_gap_resets(self):
        assert advance(date(2025, 1, 1), TODAY, 50) == StreakUpdate(1, TODAY)

    def test_clock_moved_back_resets_but_keeps_date(self):
        """A stored date after today restarts the streak without rewinding."""
        future = TODAY + timedelta(days=3)
        assert advance(future, TODAY, 7) == StreakUpdate(1, future)

    def test_increment_from_zero(self):
        """A lost streak counter still yields at least 1."""
        assert advance(TODAY - timedelta(days=1), TODAY, 0) == StreakUpdate(1, TODAY)
