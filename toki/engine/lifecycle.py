"""Reminder lifecycle transitions.

Scheduled -> (fires) -> Completed | Scheduled
Scheduled -> (cancel) -> Deactivated
Deactivated | Completed -> (reactivate) -> Scheduled

Transitions are pure: they return a new record and leave the input untouched.
"""

from dataclasses import replace
from datetime import datetime

from toki.db.models import ReminderRecord
from toki.engine.recurrence import first_occurrence, next_occurrence
from toki.utils.constants import STATUS_COMPLETED, STATUS_DEACTIVATED, STATUS_SCHEDULED
from toki.utils.errors import InvalidStateTransition


def mark_fired(record: ReminderRecord, now: datetime) -> ReminderRecord:
    """Record one firing and advance the schedule.

    One-shot reminders complete. Recurring reminders move to the next
    occurrence after the later of the fired instant and ``now``, so a late
    tick never schedules into the past and never moves backward.
    """
    if record.status != STATUS_SCHEDULED:
        raise InvalidStateTransition(f"Cannot fire a {record.status} reminder")

    fired = replace(record, last_fired_at=now, fire_count=record.fire_count + 1, updated_at=now)

    if not record.is_recurring:
        return replace(fired, status=STATUS_COMPLETED, next_fire_at=None)

    after = max(record.next_fire_at, now) if record.next_fire_at else now
    return replace(fired, next_fire_at=next_occurrence(record.rule, after, record.timezone))


def cancel(record: ReminderRecord, now: datetime | None = None) -> ReminderRecord:
    """Deactivate a scheduled reminder. Cancelling twice is a no-op."""
    if record.status == STATUS_DEACTIVATED:
        return record
    if record.status == STATUS_COMPLETED:
        raise InvalidStateTransition("Reminder already completed")

    return replace(record, status=STATUS_DEACTIVATED, next_fire_at=None, updated_at=now)


def reactivate(record: ReminderRecord, now: datetime) -> ReminderRecord:
    """Put a deactivated or completed reminder back on the schedule.

    Recurring reminders re-anchor at ``now``. A one-shot reminder can only
    come back while its instant is still ahead.
    """
    if record.status == STATUS_SCHEDULED:
        return record

    if record.is_recurring:
        return replace(
            record,
            status=STATUS_SCHEDULED,
            anchor_at=now,
            next_fire_at=first_occurrence(record.rule, now, record.timezone),
            updated_at=now,
        )

    if record.fire_at is None or record.fire_at <= now:
        raise InvalidStateTransition("Reminder time has already passed")

    return replace(record, status=STATUS_SCHEDULED, next_fire_at=record.fire_at, updated_at=now)
