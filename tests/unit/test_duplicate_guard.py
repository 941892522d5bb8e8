from datetime import timedelta

from geomood.core.guard import has_duplicate_within_hour


class TestDuplicateGuard:
    """Test suite for the rolling one-hour duplicate check."""

    def test_recent_timestamp_is_duplicate(self, now):
        assert has_duplicate_within_hour([now - timedelta(minutes=59)], now=now) is True

    def test_old_timestamp_is_not_duplicate(self, now):
        assert has_duplicate_within_hour([now - timedelta(minutes=61)], now=now) is False

    def test_empty_history(self, now):
        assert has_duplicate_within_hour([], now=now) is False

    def test_exactly_one_hour_is_not_duplicate(self, now):
        assert has_duplicate_within_hour([now - timedelta(hours=1)], now=now) is False

    def test_any_recent_entry_counts(self, now):
        timestamps = [now - timedelta(days=2), now - timedelta(minutes=5)]
        assert has_duplicate_within_hour(timestamps, now=now) is True

    def test_naive_timestamps_are_treated_as_utc(self, now):
        naive = (now - timedelta(minutes=30)).replace(tzinfo=None)
        assert has_duplicate_within_hour([naive], now=now) is True
