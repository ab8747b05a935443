"""Data models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Union

from toki.utils.constants import (
    MAX_CUSTOM_INTERVAL_DAYS,
    MIN_CUSTOM_INTERVAL_DAYS,
    STATUS_SCHEDULED,
)
from toki.utils.errors import InvalidRecurrenceRule


ReminderStatus = Literal["scheduled", "completed", "deactivated"]
OutcomeKind = Literal["absolute", "relative", "recurring", "fuzzy", "unresolved"]


def _check_time(hour: int, minute: int) -> None:
    if not 0 <= hour <= 23:
        raise InvalidRecurrenceRule(f"Hour out of range: {hour}")
    if not 0 <= minute <= 59:
        raise InvalidRecurrenceRule(f"Minute out of range: {minute}")


# Recurrence rules. Weekdays are numbered 0 = Sunday ... 6 = Saturday.


@dataclass(frozen=True)
class DailyRule:
    """Every day at hour:minute."""

    hour: int
    minute: int

    def __post_init__(self) -> None:
        _check_time(self.hour, self.minute)

    def to_dict(self) -> dict:
        return {"type": "daily", "hour": self.hour, "minute": self.minute}


@dataclass(frozen=True)
class WeeklyRule:
    """On each listed weekday at hour:minute."""

    weekdays: frozenset[int]
    hour: int
    minute: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "weekdays", frozenset(self.weekdays))
        if not self.weekdays:
            raise InvalidRecurrenceRule("Weekly rule needs at least one weekday")
        if any(not 0 <= d <= 6 for d in self.weekdays):
            raise InvalidRecurrenceRule(f"Weekday out of range: {sorted(self.weekdays)}")
        _check_time(self.hour, self.minute)

    def to_dict(self) -> dict:
        return {
            "type": "weekly",
            "weekdays": sorted(self.weekdays),
            "hour": self.hour,
            "minute": self.minute,
        }


@dataclass(frozen=True)
class MonthlyRule:
    """On each listed day of the month at hour:minute."""

    month_days: frozenset[int]
    hour: int
    minute: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "month_days", frozenset(self.month_days))
        if not self.month_days:
            raise InvalidRecurrenceRule("Monthly rule needs at least one day")
        if any(not 1 <= d <= 31 for d in self.month_days):
            raise InvalidRecurrenceRule(f"Day of month out of range: {sorted(self.month_days)}")
        _check_time(self.hour, self.minute)

    def to_dict(self) -> dict:
        return {
            "type": "monthly",
            "month_days": sorted(self.month_days),
            "hour": self.hour,
            "minute": self.minute,
        }


@dataclass(frozen=True)
class CustomRule:
    """Every interval_days days at hour:minute.

    With ``weekday`` set the cycle is whole weeks and lands on that weekday.
    """

    interval_days: int
    hour: int
    minute: int
    weekday: int | None = None

    def __post_init__(self) -> None:
        if not MIN_CUSTOM_INTERVAL_DAYS <= self.interval_days <= MAX_CUSTOM_INTERVAL_DAYS:
            raise InvalidRecurrenceRule(
                f"Interval must be between {MIN_CUSTOM_INTERVAL_DAYS} and "
                f"{MAX_CUSTOM_INTERVAL_DAYS} days, got {self.interval_days}"
            )
        if self.weekday is not None:
            if not 0 <= self.weekday <= 6:
                raise InvalidRecurrenceRule(f"Weekday out of range: {self.weekday}")
            if self.interval_days % 7:
                raise InvalidRecurrenceRule(
                    f"A weekday needs a whole number of weeks, got {self.interval_days} days"
                )
        _check_time(self.hour, self.minute)

    def to_dict(self) -> dict:
        data = {
            "type": "custom",
            "interval_days": self.interval_days,
            "hour": self.hour,
            "minute": self.minute,
        }
        if self.weekday is not None:
            data["weekday"] = self.weekday
        return data


RecurrenceRule = Union[DailyRule, WeeklyRule, MonthlyRule, CustomRule]


def rule_from_dict(data: dict) -> RecurrenceRule:
    """Rebuild a recurrence rule from its ``to_dict`` form."""
    kind = data.get("type")
    hour, minute = int(data["hour"]), int(data["minute"])

    if kind == "daily":
        return DailyRule(hour, minute)
    elif kind == "weekly":
        return WeeklyRule(frozenset(data["weekdays"]), hour, minute)
    elif kind == "monthly":
        return MonthlyRule(frozenset(data["month_days"]), hour, minute)
    elif kind == "custom":
        return CustomRule(int(data["interval_days"]), hour, minute, data.get("weekday"))

    raise InvalidRecurrenceRule(f"Unknown rule type: {kind!r}")


@dataclass(frozen=True)
class ParseOutcome:
    """Result from resolving a temporal expression."""

    kind: OutcomeKind
    locale: str
    matched_text: str = ""
    content: str = ""
    instant: datetime | None = None
    rule: RecurrenceRule | None = None
    confidence: float = 0.0  # diagnostic only, 0-1

    @classmethod
    def unresolved(cls, locale: str, content: str) -> "ParseOutcome":
        return cls(kind="unresolved", locale=locale, content=content)

    @property
    def is_resolved(self) -> bool:
        return self.kind != "unresolved"

    @property
    def is_recurring(self) -> bool:
        return self.kind == "recurring"


@dataclass
class User:
    """Telegram user."""

    telegram_id: int
    timezone: str
    created_at: datetime
    locale: str | None = None  # None means detect from each message
    id: int | None = None


@dataclass
class ReminderRecord:
    """A persisted reminder, one-shot or recurring."""

    owner_id: int  # Telegram chat id
    content: str
    locale: str
    timezone: str
    status: ReminderStatus = STATUS_SCHEDULED
    fire_at: datetime | None = None  # UTC, one-shot only
    rule: RecurrenceRule | None = None
    anchor_at: datetime | None = None  # UTC, recurring only
    next_fire_at: datetime | None = None  # UTC
    last_fired_at: datetime | None = None  # UTC
    fire_count: int = 0
    source_text: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    id: int | None = None

    @property
    def is_recurring(self) -> bool:
        return self.rule is not None


@dataclass
class DispatchResult:
    """What happened to one due record during a dispatch tick."""

    record: ReminderRecord
    outcome: str
    error: str | None = None
