"""Recurrence rule evaluation on top of dateutil's rrule."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from dateutil.rrule import DAILY, MONTHLY, WEEKLY, rrule

from toki.db.models import CustomRule, DailyRule, MonthlyRule, RecurrenceRule, WeeklyRule
from toki.utils.time_utils import to_weekday_index


def to_rrule(rule: RecurrenceRule, dtstart: datetime) -> rrule:
    """Build the dateutil rrule for a daily, weekly or monthly rule.

    ``dtstart`` is a naive local datetime; the rule's hour:minute are wall-clock
    times in the same zone.
    """
    kwargs = {
        "dtstart": dtstart,
        "byhour": rule.hour,
        "byminute": rule.minute,
        "bysecond": 0,
    }

    if isinstance(rule, DailyRule):
        return rrule(DAILY, **kwargs)
    elif isinstance(rule, WeeklyRule):
        # dateutil counts Monday as 0, rules count Sunday as 0
        byweekday = sorted((d - 1) % 7 for d in rule.weekdays)
        return rrule(WEEKLY, byweekday=byweekday, **kwargs)
    elif isinstance(rule, MonthlyRule):
        # Months without the day (31st, Feb 30th) are skipped by rrule
        return rrule(MONTHLY, bymonthday=sorted(rule.month_days), **kwargs)

    raise TypeError(f"No rrule for {type(rule).__name__}")


def next_occurrence(rule: RecurrenceRule, after: datetime, tz: str | None = None) -> datetime:
    """Get the first occurrence of ``rule`` strictly after ``after``.

    Args:
        rule: Recurrence rule
        after: Timezone-aware instant
        tz: IANA zone the rule's hour:minute refers to (defaults to after's zone)

    Returns:
        Timezone-aware datetime in ``tz``, always later than ``after``
    """
    if after.tzinfo is None:
        raise ValueError("after must be timezone-aware")

    zone = ZoneInfo(tz) if tz else after.tzinfo
    local_after = after.astimezone(zone)

    if isinstance(rule, CustomRule):
        # Anchored to the rule's time of day, not to after's
        day = local_after.date() + timedelta(days=rule.interval_days)
        if rule.weekday is not None:
            day += timedelta(days=(rule.weekday - to_weekday_index(day)) % 7)
        return datetime(day.year, day.month, day.day, rule.hour, rule.minute, tzinfo=zone)

    # Work on naive wall-clock times so DST shifts keep the hour:minute
    naive_after = local_after.replace(tzinfo=None)
    midnight = naive_after.replace(hour=0, minute=0, second=0, microsecond=0)
    schedule = to_rrule(rule, midnight)

    candidate = schedule.after(naive_after)
    while candidate is not None and candidate.replace(tzinfo=zone) <= after:
        candidate = schedule.after(candidate)

    if candidate is None:
        raise ValueError("No next occurrence found")

    return candidate.replace(tzinfo=zone)


def first_occurrence(rule: RecurrenceRule, now: datetime, tz: str | None = None) -> datetime:
    """First fire time for a newly created or reactivated recurring reminder.

    A weekday-anchored custom rule starts on the next such weekday rather than
    a full interval ahead.
    """
    if isinstance(rule, CustomRule) and rule.weekday is not None:
        weekly = WeeklyRule(frozenset({rule.weekday}), rule.hour, rule.minute)
        return next_occurrence(weekly, now, tz)
    return next_occurrence(rule, now, tz)
