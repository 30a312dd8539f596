"""Tests for presence and relative-time display rules."""

from datetime import datetime, timedelta, timezone

import pytest

from fitmatch.chat.formatting import format_message_time, is_online

# Wednesday
NOW = datetime(2024, 3, 20, 15, 30, tzinfo=timezone.utc)


class TestIsOnline:
    def test_exactly_five_minutes_is_online(self):
        assert is_online(NOW - timedelta(minutes=5), NOW)

    def test_just_over_five_minutes_is_offline(self):
        assert not is_online(NOW - timedelta(minutes=5, seconds=1), NOW)

    def test_never_active_is_offline(self):
        assert not is_online(None, NOW)

    def test_naive_timestamps_are_utc(self):
        assert is_online(datetime(2024, 3, 20, 15, 29), NOW)

    def test_custom_window(self):
        assert is_online(NOW - timedelta(minutes=20), NOW, window=timedelta(minutes=30))


class TestFormatMessageTime:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (datetime(2024, 3, 20, 0, 5, tzinfo=timezone.utc), "00:05"),
            (datetime(2024, 3, 20, 9, 7, tzinfo=timezone.utc), "09:07"),
            (datetime(2024, 3, 19, 23, 59, tzinfo=timezone.utc), "yesterday"),
            (datetime(2024, 3, 18, 8, 0, tzinfo=timezone.utc), "Monday"),
            (datetime(2024, 3, 14, 8, 0, tzinfo=timezone.utc), "Thursday"),
            (datetime(2024, 3, 13, 8, 0, tzinfo=timezone.utc), "13/03/24"),
            (datetime(2023, 12, 25, 8, 0, tzinfo=timezone.utc), "25/12/23"),
        ],
    )
    def test_relative_formats(self, value, expected):
        assert format_message_time(value, NOW) == expected

    def test_missing_timestamp(self):
        assert format_message_time(None, NOW) == ""

    def test_days_follow_nows_timezone(self):
        buenos_aires = timezone(timedelta(hours=-3))
        now = datetime(2024, 3, 20, 1, 0, tzinfo=buenos_aires)
        # 02:00 UTC on the 20th is 23:00 on the 19th in Buenos Aires
        value = datetime(2024, 3, 20, 2, 0, tzinfo=timezone.utc)

        assert format_message_time(value, now) == "yesterday"
        assert format_message_time(value, now.astimezone(timezone.utc)) == "02:00"
