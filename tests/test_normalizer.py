"""Tests for calendar normalization helpers."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from toki.parser.normalizer import (
    check_time,
    normalize_day_of_month,
    normalize_day_offset,
    normalize_next_weekday,
    normalize_relative_offset,
    normalize_specific_date,
    normalize_time_of_day,
    normalize_week_weekday,
)

TAIPEI = ZoneInfo("Asia/Taipei")

# Wednesday
NOW = datetime(2026, 3, 4, 10, 0, tzinfo=TAIPEI)


def at(month, day, hour=9, minute=0, year=2026):
    return datetime(year, month, day, hour, minute, tzinfo=TAIPEI)


def test_check_time_rejects_out_of_range():
    check_time(23, 59)
    with pytest.raises(ValueError):
        check_time(24, 0)
    with pytest.raises(ValueError):
        check_time(8, 60)


def test_relative_offset():
    assert normalize_relative_offset(NOW, 30, "minutes") == NOW + timedelta(minutes=30)
    assert normalize_relative_offset(NOW, 2, "hours") == NOW + timedelta(hours=2)
    assert normalize_relative_offset(NOW, 3, "days") == NOW + timedelta(days=3)

    with pytest.raises(ValueError):
        normalize_relative_offset(NOW, 0, "minutes")
    with pytest.raises(ValueError):
        normalize_relative_offset(NOW, 1, "fortnights")


def test_time_of_day_rolls_to_tomorrow():
    """A time already passed today means tomorrow."""
    assert normalize_time_of_day(NOW, 11, 0) == at(3, 4, 11)
    assert normalize_time_of_day(NOW, 8, 0) == at(3, 5, 8)
    # Exactly now is not in the future
    assert normalize_time_of_day(NOW, 10, 0) == at(3, 5, 10)


def test_day_offset():
    assert normalize_day_offset(NOW, 1, 8, 0) == at(3, 5, 8)
    assert normalize_day_offset(NOW, 3, 20, 0) == at(3, 7, 20)
    # Today at a passed time rolls, other offsets do not need to
    assert normalize_day_offset(NOW, 0, 9, 0) == at(3, 5, 9)


def test_next_weekday_is_strictly_after_today():
    assert normalize_next_weekday(NOW, 1, 9, 0) == at(3, 9)  # Monday
    assert normalize_next_weekday(NOW, 5, 9, 0) == at(3, 6)  # Friday
    # Today's weekday means next week
    assert normalize_next_weekday(NOW, 3, 18, 0) == at(3, 11, 18)


def test_week_weekday_uses_calendar_weeks():
    """Weeks start on Monday."""
    assert normalize_week_weekday(NOW, 1, 9, 0, weeks_ahead=1) == at(3, 9)
    assert normalize_week_weekday(NOW, 0, 9, 0, weeks_ahead=0) == at(3, 8)
    assert normalize_week_weekday(NOW, 0, 9, 0, weeks_ahead=1) == at(3, 15)
    assert normalize_week_weekday(NOW, 5, 9, 0, weeks_ahead=2) == at(3, 20)


def test_specific_date_rolls_to_next_year():
    assert normalize_specific_date(NOW, 12, 25, 9, 0) == at(12, 25)
    assert normalize_specific_date(NOW, 3, 1, 9, 0) == at(3, 1, year=2027)


def test_specific_date_feb_29_finds_leap_year():
    assert normalize_specific_date(NOW, 2, 29, 9, 0) == at(2, 29, year=2028)


def test_specific_date_rejects_impossible_dates():
    with pytest.raises(ValueError):
        normalize_specific_date(NOW, 2, 30, 9, 0)
    with pytest.raises(ValueError):
        normalize_specific_date(NOW, 4, 31, 9, 0)
    with pytest.raises(ValueError):
        normalize_specific_date(NOW, 13, 1, 9, 0)


def test_specific_date_explicit_year_is_kept():
    assert normalize_specific_date(NOW, 1, 2, 9, 0, year=2027) == at(1, 2, year=2027)
    # Past years are returned as-is; the resolver rejects them
    assert normalize_specific_date(NOW, 1, 2, 9, 0, year=2025) == at(1, 2, year=2025)


def test_day_of_month_skips_short_months():
    assert normalize_day_of_month(NOW, 31, 9, 0) == at(3, 31)
    assert normalize_day_of_month(NOW, 3, 9, 0) == at(4, 3)

    april = at(4, 1, 8)
    assert normalize_day_of_month(april, 31, 9, 0) == at(5, 31)


def test_day_of_month_months_ahead():
    assert normalize_day_of_month(NOW, 5, 9, 0, months_ahead=1) == at(4, 5)
    # April has no 31st
    assert normalize_day_of_month(NOW, 31, 9, 0, months_ahead=1) == at(5, 31)
