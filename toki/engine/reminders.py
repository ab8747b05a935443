"""Reminder service operations over the repository."""

import logging
from datetime import datetime, timedelta
from typing import List
from zoneinfo import ZoneInfo

from toki.db.models import ReminderRecord
from toki.db.repository import Repository
from toki.engine.lifecycle import cancel, reactivate
from toki.engine.recurrence import first_occurrence
from toki.parser.nlp import parse_reminder
from toki.parser.patterns import get_provider
from toki.utils.constants import (
    FALLBACK_OFFSET_MINUTES,
    MAX_CONTENT_LENGTH,
    MAX_REMINDERS_PER_USER,
    STATUS_SCHEDULED,
)
from toki.utils.errors import ParseUnresolved, ReminderLimitExceeded, ReminderNotFound

logger = logging.getLogger(__name__)


async def create_reminder(
    repo: Repository,
    owner_id: int,
    text: str,
    locale: str | None,
    now: datetime,
    tz: str,
    fallback_minutes: int = FALLBACK_OFFSET_MINUTES,
) -> ReminderRecord:
    """Resolve ``text`` and persist the resulting reminder.

    Text with no recognizable time is still scheduled, ``fallback_minutes``
    from now.

    Raises:
        ReminderLimitExceeded: owner already holds the maximum scheduled reminders
        InvalidRecurrenceRule: the text describes an invalid recurrence
        UnsupportedLocale: unknown locale tag
    """
    if await repo.count_scheduled(owner_id) >= MAX_REMINDERS_PER_USER:
        raise ReminderLimitExceeded(
            f"At most {MAX_REMINDERS_PER_USER} scheduled reminders per user"
        )

    local_now = now.astimezone(ZoneInfo(tz))

    try:
        outcome = parse_reminder(text, locale, local_now)
        tag, content = outcome.locale, outcome.content
    except ParseUnresolved as e:
        logger.info(f"No time found in {text!r}, scheduling {fallback_minutes} min ahead")
        outcome = None
        tag, content = e.locale, e.content

    content = (content or get_provider(tag).default_label)[:MAX_CONTENT_LENGTH]

    record = ReminderRecord(
        owner_id=owner_id,
        content=content,
        locale=tag,
        timezone=tz,
        source_text=text,
        created_at=now,
        updated_at=now,
    )

    if outcome is not None and outcome.is_recurring:
        record.rule = outcome.rule
        record.anchor_at = now
        record.next_fire_at = first_occurrence(outcome.rule, local_now, tz)
    elif outcome is not None:
        record.fire_at = outcome.instant
        record.next_fire_at = outcome.instant
    else:
        record.fire_at = local_now + timedelta(minutes=fallback_minutes)
        record.next_fire_at = record.fire_at

    saved = await repo.create_reminder(record)
    logger.info(
        f"Created reminder {saved.id} for {owner_id}: {content!r} "
        f"({outcome.kind if outcome else 'fallback'}, next {saved.next_fire_at})"
    )
    return saved


async def get_owned_reminder(repo: Repository, owner_id: int, reminder_id: int) -> ReminderRecord:
    """Fetch a reminder, treating someone else's as missing."""
    record = await repo.get_reminder(reminder_id)
    if record is None or record.owner_id != owner_id:
        raise ReminderNotFound(reminder_id)
    return record


async def cancel_reminder(
    repo: Repository, owner_id: int, reminder_id: int, now: datetime
) -> ReminderRecord:
    """Deactivate one of the owner's reminders."""
    record = await get_owned_reminder(repo, owner_id, reminder_id)
    cancelled = cancel(record, now)
    if cancelled is not record:
        await repo.save_status(cancelled)
        logger.info(f"Cancelled reminder {reminder_id}")
    return cancelled


async def reactivate_reminder(
    repo: Repository, owner_id: int, reminder_id: int, now: datetime
) -> ReminderRecord:
    """Put one of the owner's reminders back on the schedule."""
    record = await get_owned_reminder(repo, owner_id, reminder_id)
    if record.status == STATUS_SCHEDULED:
        return record

    if await repo.count_scheduled(owner_id) >= MAX_REMINDERS_PER_USER:
        raise ReminderLimitExceeded(
            f"At most {MAX_REMINDERS_PER_USER} scheduled reminders per user"
        )

    reactivated = reactivate(record, now)
    await repo.save_status(reactivated)
    logger.info(f"Reactivated reminder {reminder_id}, next {reactivated.next_fire_at}")
    return reactivated


async def list_reminders(
    repo: Repository, owner_id: int, include_inactive: bool = False
) -> List[ReminderRecord]:
    """The owner's reminders, soonest first; scheduled only unless asked."""
    if include_inactive:
        return await repo.get_reminders_by_owner(owner_id)
    return await repo.get_reminders_by_owner(owner_id, status=STATUS_SCHEDULED)
