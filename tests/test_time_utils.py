"""Tests for time utilities."""

from datetime import datetime
from zoneinfo import ZoneInfo

from toki.utils.time_utils import (
    format_local,
    format_relative_time,
    from_utc,
    to_utc,
    to_weekday_index,
)


def test_to_utc():
    """Test timezone conversion to UTC."""
    dt = datetime(2026, 3, 15, 14, 30, tzinfo=ZoneInfo("Asia/Taipei"))
    utc_dt = to_utc(dt, "Asia/Taipei")

    assert utc_dt.tzinfo == ZoneInfo("UTC")
    # Taipei is UTC+8
    assert utc_dt.hour == 6


def test_to_utc_naive_is_local():
    """A naive datetime is read in the given zone."""
    utc_dt = to_utc(datetime(2026, 3, 15, 9, 0), "Asia/Tokyo")

    assert utc_dt == datetime(2026, 3, 15, 0, 0, tzinfo=ZoneInfo("UTC"))


def test_from_utc():
    """Test timezone conversion from UTC."""
    dt = datetime(2026, 3, 15, 0, 30, tzinfo=ZoneInfo("UTC"))
    local = from_utc(dt, "Asia/Taipei")

    assert local.tzinfo == ZoneInfo("Asia/Taipei")
    assert (local.hour, local.minute) == (8, 30)


def test_weekday_index_starts_on_sunday():
    assert to_weekday_index(datetime(2026, 3, 1)) == 0  # Sunday
    assert to_weekday_index(datetime(2026, 3, 4)) == 3  # Wednesday
    assert to_weekday_index(datetime(2026, 3, 7)) == 6  # Saturday


def test_format_local():
    """Instants are shown on the record's wall clock."""
    dt = datetime(2026, 3, 5, 0, 30, tzinfo=ZoneInfo("UTC"))

    assert format_local(dt, "Asia/Taipei", "zh") == "2026年3月5日(週四) 08:30"
    assert format_local(dt, "Asia/Tokyo", "ja") == "2026年3月5日(木) 09:30"


def test_format_relative_time():
    """Test relative time formatting."""
    now = datetime(2026, 3, 15, 12, 0, tzinfo=ZoneInfo("UTC"))

    future_5min = datetime(2026, 3, 15, 12, 5, tzinfo=ZoneInfo("UTC"))
    assert format_relative_time(future_5min, "zh", now) == "5分鐘後"
    assert format_relative_time(future_5min, "ja", now) == "5分後"

    past_2h = datetime(2026, 3, 15, 10, 0, tzinfo=ZoneInfo("UTC"))
    assert format_relative_time(past_2h, "zh", now) == "2小時前"

    future_3d = datetime(2026, 3, 18, 12, 0, tzinfo=ZoneInfo("UTC"))
    assert format_relative_time(future_3d, "ja", now) == "3日後"
