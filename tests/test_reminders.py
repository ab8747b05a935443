"""Tests for reminder service operations."""

from datetime import datetime, timedelta
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from toki.db.models import WeeklyRule
from toki.engine.reminders import (
    cancel_reminder,
    create_reminder,
    list_reminders,
    reactivate_reminder,
)
from toki.utils.errors import (
    InvalidRecurrenceRule,
    InvalidStateTransition,
    ReminderLimitExceeded,
    ReminderNotFound,
)

UTC = ZoneInfo("UTC")
TAIPEI = ZoneInfo("Asia/Taipei")
# 10:00 Wednesday in Taipei
NOW = datetime(2026, 3, 4, 2, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_create_one_shot(repo):
    record = await create_reminder(repo, 42, "明天8點吃藥", "zh", NOW, "Asia/Taipei")

    assert record.id is not None
    assert record.content == "吃藥"
    assert record.locale == "zh"
    assert record.source_text == "明天8點吃藥"
    assert record.fire_at == datetime(2026, 3, 5, 8, 0, tzinfo=TAIPEI)
    assert record.next_fire_at == record.fire_at
    assert record.rule is None


@pytest.mark.asyncio
async def test_create_recurring(repo):
    record = await create_reminder(repo, 42, "毎週月曜9時に会議", None, NOW, "Asia/Tokyo")

    assert record.locale == "ja"
    assert record.rule == WeeklyRule(frozenset({1}), 9, 0)
    assert record.anchor_at == NOW
    assert record.fire_at is None
    assert record.next_fire_at == datetime(2026, 3, 9, 9, 0, tzinfo=ZoneInfo("Asia/Tokyo"))


@pytest.mark.asyncio
async def test_reference_time_is_local(repo):
    """Day keywords count from the owner's date, not from UTC."""
    late_evening = datetime(2026, 3, 4, 15, 30, tzinfo=UTC)  # 23:30 in Taipei

    record = await create_reminder(repo, 42, "明天8點", "zh", late_evening, "Asia/Taipei")

    assert record.fire_at == datetime(2026, 3, 5, 8, 0, tzinfo=TAIPEI)


@pytest.mark.asyncio
async def test_unresolved_text_falls_back(repo):
    record = await create_reminder(repo, 42, "買牛奶", "zh", NOW, "Asia/Taipei")

    assert record.content == "買牛奶"
    assert record.fire_at == NOW + timedelta(minutes=60)

    record = await create_reminder(
        repo, 42, "買牛奶", "zh", NOW, "Asia/Taipei", fallback_minutes=15
    )
    assert record.fire_at == NOW + timedelta(minutes=15)


@pytest.mark.asyncio
async def test_empty_content_gets_default_label(repo):
    assert (await create_reminder(repo, 42, "明天8點", "zh", NOW, "Asia/Taipei")).content == "提醒"
    assert (await create_reminder(repo, 42, "明日8時", "ja", NOW, "Asia/Tokyo")).content == "リマインダー"


@pytest.mark.asyncio
async def test_content_is_truncated(repo):
    record = await create_reminder(repo, 42, "明天8點" + "吃" * 300, "zh", NOW, "Asia/Taipei")

    assert len(record.content) == 200


@pytest.mark.asyncio
async def test_invalid_rule_is_not_saved(repo):
    with pytest.raises(InvalidRecurrenceRule):
        await create_reminder(repo, 42, "每0天", "zh", NOW, "Asia/Taipei")

    assert await list_reminders(repo, 42, include_inactive=True) == []


@pytest.mark.asyncio
async def test_limit(repo):
    with patch("toki.engine.reminders.MAX_REMINDERS_PER_USER", 2):
        await create_reminder(repo, 42, "明天8點", "zh", NOW, "Asia/Taipei")
        second = await create_reminder(repo, 42, "明天9點", "zh", NOW, "Asia/Taipei")

        with pytest.raises(ReminderLimitExceeded):
            await create_reminder(repo, 42, "明天10點", "zh", NOW, "Asia/Taipei")

        # Other owners have their own quota
        await create_reminder(repo, 7, "明天10點", "zh", NOW, "Asia/Taipei")

        # Cancelled reminders free a slot
        await cancel_reminder(repo, 42, second.id, NOW)
        await create_reminder(repo, 42, "明天10點", "zh", NOW, "Asia/Taipei")

        with pytest.raises(ReminderLimitExceeded):
            await reactivate_reminder(repo, 42, second.id, NOW)


@pytest.mark.asyncio
async def test_cancel_and_reactivate(repo):
    record = await create_reminder(repo, 42, "明天8點吃藥", "zh", NOW, "Asia/Taipei")

    cancelled = await cancel_reminder(repo, 42, record.id, NOW)
    assert cancelled.status == "deactivated"
    assert await list_reminders(repo, 42) == []
    assert len(await list_reminders(repo, 42, include_inactive=True)) == 1

    # Cancelling again is a no-op
    assert (await cancel_reminder(repo, 42, record.id, NOW)).status == "deactivated"

    reactivated = await reactivate_reminder(repo, 42, record.id, NOW)
    assert reactivated.status == "scheduled"
    assert (await repo.get_reminder(record.id)).next_fire_at == record.fire_at


@pytest.mark.asyncio
async def test_reactivate_passed_one_shot_raises(repo):
    record = await create_reminder(repo, 42, "30分鐘後", "zh", NOW, "Asia/Taipei")
    await cancel_reminder(repo, 42, record.id, NOW)

    with pytest.raises(InvalidStateTransition):
        await reactivate_reminder(repo, 42, record.id, NOW + timedelta(hours=1))


@pytest.mark.asyncio
async def test_other_owners_reminders_are_hidden(repo):
    record = await create_reminder(repo, 42, "明天8點吃藥", "zh", NOW, "Asia/Taipei")

    with pytest.raises(ReminderNotFound):
        await cancel_reminder(repo, 7, record.id, NOW)
    with pytest.raises(ReminderNotFound):
        await reactivate_reminder(repo, 7, record.id, NOW)
    with pytest.raises(ReminderNotFound):
        await cancel_reminder(repo, 42, record.id + 1, NOW)
