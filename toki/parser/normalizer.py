"""Calendar arithmetic for resolved dates and times.

Every helper takes the reference instant ``now`` (timezone-aware) and builds
its result in ``now``'s zone. Out-of-range or calendar-invalid input raises
``ValueError`` so the caller can reject the pattern and try the next one.
"""

import calendar
from datetime import date, datetime, timedelta

from toki.utils.time_utils import to_weekday_index

# Longest Gregorian cycle in which a given Feb 29 is guaranteed to reappear
_LEAP_SEARCH_YEARS = 8


def check_time(hour: int, minute: int) -> None:
    """Reject hours outside 0-23 and minutes outside 0-59."""
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour out of range: {hour}")
    if not 0 <= minute <= 59:
        raise ValueError(f"Minute out of range: {minute}")


def at_time(day: date, hour: int, minute: int, now: datetime) -> datetime:
    """Combine a calendar day with hour:minute in ``now``'s zone."""
    check_time(hour, minute)
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=now.tzinfo)


def normalize_relative_offset(now: datetime, amount: int, unit: str) -> datetime:
    """Normalize 'in N minutes/hours/days'."""
    if amount <= 0:
        raise ValueError(f"Offset must be positive: {amount}")

    if unit == "minutes":
        return now + timedelta(minutes=amount)
    elif unit == "hours":
        return now + timedelta(hours=amount)
    elif unit == "days":
        return now + timedelta(days=amount)

    raise ValueError(f"Unknown time unit: {unit}")


def normalize_time_of_day(now: datetime, hour: int, minute: int) -> datetime:
    """Today at hour:minute, or tomorrow if that has already passed."""
    result = at_time(now.date(), hour, minute, now)
    if result <= now:
        result = at_time(now.date() + timedelta(days=1), hour, minute, now)
    return result


def normalize_day_offset(now: datetime, days: int, hour: int, minute: int) -> datetime:
    """Today/tomorrow/day after tomorrow at hour:minute.

    Only "today" can land in the past; it rolls to tomorrow.
    """
    result = at_time(now.date() + timedelta(days=days), hour, minute, now)
    if days == 0 and result <= now:
        result += timedelta(days=1)
    return result


def normalize_next_weekday(now: datetime, weekday: int, hour: int, minute: int) -> datetime:
    """The named weekday strictly after today (0 = Sunday).

    Asking for today's weekday means the same weekday next week.
    """
    if not 0 <= weekday <= 6:
        raise ValueError(f"Weekday out of range: {weekday}")

    days_ahead = (weekday - to_weekday_index(now)) % 7
    if days_ahead == 0:
        days_ahead = 7
    return at_time(now.date() + timedelta(days=days_ahead), hour, minute, now)


def normalize_week_weekday(
    now: datetime, weekday: int, hour: int, minute: int, weeks_ahead: int
) -> datetime:
    """The named weekday in the calendar week ``weeks_ahead`` weeks from now.

    Calendar weeks start on Monday, so "next Sunday" said on a Monday is
    thirteen days away and "next Monday" said on a Sunday is tomorrow.
    """
    if not 0 <= weekday <= 6:
        raise ValueError(f"Weekday out of range: {weekday}")

    monday = now.date() - timedelta(days=now.weekday())
    offset_from_monday = (weekday - 1) % 7
    day = monday + timedelta(weeks=weeks_ahead, days=offset_from_monday)
    return at_time(day, hour, minute, now)


def normalize_specific_date(
    now: datetime,
    month: int,
    day: int,
    hour: int,
    minute: int,
    year: int | None = None,
) -> datetime:
    """Normalize a month/day (and optional year) to its next occurrence.

    With an explicit year the date is used as-is. Without one, the reference
    year is tried first and then following years, so that 2/29 finds the next
    leap year. A month/day no year admits (2/30) is rejected.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {month}")
    if not 1 <= day <= 31:
        raise ValueError(f"Day out of range: {day}")

    if year is not None:
        return at_time(date(year, month, day), hour, minute, now)

    # 2000 is a leap year, so this is the most days the month ever has
    if day > calendar.monthrange(2000, month)[1]:
        raise ValueError(f"{month}/{day} is not a calendar date")

    for candidate_year in range(now.year, now.year + _LEAP_SEARCH_YEARS + 1):
        try:
            result = at_time(date(candidate_year, month, day), hour, minute, now)
        except ValueError:
            continue  # Feb 29 outside a leap year
        if result > now:
            return result

    raise ValueError(f"No upcoming occurrence of {month}/{day}")


def normalize_day_of_month(
    now: datetime, day: int, hour: int, minute: int, months_ahead: int = 0
) -> datetime:
    """Normalize a bare day of month (25th) to its next occurrence.

    Starts ``months_ahead`` months from the reference month and moves forward
    to the first month that has that day and lands strictly after ``now``.
    """
    if not 1 <= day <= 31:
        raise ValueError(f"Day out of range: {day}")

    year, month = now.year, now.month
    for _ in range(months_ahead):
        year, month = _next_month(year, month)

    # Every day 1-31 appears at least once in any 12-month window
    for _ in range(13):
        if day <= calendar.monthrange(year, month)[1]:
            result = at_time(date(year, month, day), hour, minute, now)
            if result > now:
                return result
        year, month = _next_month(year, month)

    raise ValueError(f"No upcoming occurrence of day {day}")


def _next_month(year: int, month: int) -> tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1
