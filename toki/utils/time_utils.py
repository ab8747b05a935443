"""Time and timezone utilities."""

from datetime import datetime
from zoneinfo import ZoneInfo


def to_utc(dt: datetime, tz: str) -> datetime:
    """Convert a datetime to UTC, treating naive values as local to ``tz``."""
    if dt.tzinfo is None:
        # Assume it's in the given timezone
        dt = dt.replace(tzinfo=ZoneInfo(tz))
    return dt.astimezone(ZoneInfo("UTC"))


def from_utc(dt: datetime, tz: str) -> datetime:
    """Convert a UTC datetime to the given timezone."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo("UTC"))
    return dt.astimezone(ZoneInfo(tz))


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(ZoneInfo("UTC"))


def to_weekday_index(dt: datetime) -> int:
    """Weekday of ``dt`` with 0 = Sunday ... 6 = Saturday."""
    return (dt.weekday() + 1) % 7


def format_local(dt: datetime, tz: str, locale: str) -> str:
    """Format an instant in the user's zone, e.g. ``2026年3月5日 08:30``."""
    local = from_utc(dt, tz)
    if locale == "ja":
        weekdays = "日月火水木金土"
        return (
            f"{local.year}年{local.month}月{local.day}日"
            f"({weekdays[to_weekday_index(local)]}) {local:%H:%M}"
        )
    weekdays = "日一二三四五六"
    return (
        f"{local.year}年{local.month}月{local.day}日"
        f"(週{weekdays[to_weekday_index(local)]}) {local:%H:%M}"
    )


def format_relative_time(dt: datetime, locale: str, now: datetime | None = None) -> str:
    """Format a datetime relative to now.

    Examples:
        "5分鐘後" / "5分後"
        "2小時後" / "2時間後"
        "3天後" / "3日後"
    """
    if now is None:
        now = utc_now()

    total_seconds = (dt - now).total_seconds()
    units = {
        "zh": ("分鐘", "小時", "天", "後", "前"),
        "ja": ("分", "時間", "日", "後", "前"),
    }[locale if locale == "ja" else "zh"]
    suffix = units[3] if total_seconds >= 0 else units[4]
    abs_seconds = abs(total_seconds)

    if abs_seconds < 3600:
        return f"{max(1, int(abs_seconds / 60))}{units[0]}{suffix}"
    elif abs_seconds < 86400:
        return f"{int(abs_seconds / 3600)}{units[1]}{suffix}"
    return f"{int(abs_seconds / 86400)}{units[2]}{suffix}"
