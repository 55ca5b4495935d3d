"""Tests for interval arithmetic and timestamp parsing."""

from datetime import datetime, timedelta, timezone

import pytest

from booking_api.core.exceptions import ValidationError
from booking_api.utils.datetime_parsing import parse_timestamp, to_utc
from booking_api.utils.intervals import (
    contains,
    day_of_week,
    hhmm_to_minutes,
    minutes_since_midnight,
)


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2030, 1, 7, hour, minute, tzinfo=timezone.utc)  # a Monday


class TestContains:
    def test_contains_is_inclusive(self):
        assert contains(_at(9), _at(17), _at(9), _at(17))
        assert contains(_at(9), _at(17), _at(10), _at(11))
        assert not contains(_at(9), _at(17), _at(16, 30), _at(17, 30))


class TestWallClock:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("09:00", 540),
            ("9:05", 545),
            ("00:00", 0),
            ("23:59", 1439),
            (" 17:30 ", 1050),
        ],
    )
    def test_hhmm_valid(self, value, expected):
        assert hhmm_to_minutes(value) == expected

    @pytest.mark.parametrize("value", [None, "", "9", "24:00", "25:00", "24:30", "10:60", "ab:cd"])
    def test_hhmm_invalid_returns_none(self, value):
        assert hhmm_to_minutes(value) is None

    def test_minutes_since_midnight(self):
        assert minutes_since_midnight(_at(13, 45)) == 825

    def test_day_of_week_sunday_is_zero(self):
        monday = _at(9)
        assert day_of_week(monday) == 1
        assert day_of_week(monday - timedelta(days=1)) == 0
        assert day_of_week(monday + timedelta(days=5)) == 6


class TestParseTimestamp:
    def test_iso_with_z_suffix(self):
        assert parse_timestamp("2030-01-07T09:00:00Z", "start") == _at(9)

    def test_iso_with_offset_is_normalized(self):
        assert parse_timestamp("2030-01-07T11:00:00+02:00", "start") == _at(9)

    def test_naive_datetime_taken_as_utc(self):
        assert parse_timestamp(datetime(2030, 1, 7, 9), "start") == _at(9)

    def test_epoch_seconds_and_millis(self):
        ts = int(_at(9).timestamp())
        assert parse_timestamp(ts, "start") == _at(9)
        assert parse_timestamp(str(ts * 1000), "start") == _at(9)

    def test_epoch_int_and_string_agree(self):
        millis = int(_at(9).timestamp()) * 1000
        assert parse_timestamp(millis, "start") == _at(9)
        assert parse_timestamp(str(millis), "start") == parse_timestamp(millis, "start")

    def test_missing_value(self):
        with pytest.raises(ValidationError, match="Missing required field: start"):
            parse_timestamp(None, "start")

    def test_garbage_value(self):
        with pytest.raises(ValidationError, match="Invalid end"):
            parse_timestamp("next tuesday", "end")

    def test_to_utc_converts_offsets(self):
        eastern = timezone(timedelta(hours=-5))
        assert to_utc(datetime(2030, 1, 7, 4, tzinfo=eastern)) == _at(9)
