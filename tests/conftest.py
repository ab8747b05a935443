"""Shared fixtures."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from toki.db.migrations import init_database
from toki.db.models import ReminderRecord
from toki.db.repository import Repository

UTC = ZoneInfo("UTC")


@pytest.fixture
async def repo(tmp_path):
    """Repository over a fresh database file."""
    db_path = tmp_path / "toki.db"
    await init_database(db_path)

    repository = Repository(db_path)
    await repository.connect()
    yield repository
    await repository.close()


@pytest.fixture
def make_record():
    """Build an unsaved one-shot reminder due at ``fire_at``."""

    def _make(fire_at: datetime, owner_id: int = 42, **kwargs) -> ReminderRecord:
        kwargs.setdefault("content", "吃藥")
        kwargs.setdefault("locale", "zh")
        kwargs.setdefault("timezone", "Asia/Taipei")
        kwargs.setdefault("created_at", datetime(2026, 3, 1, tzinfo=UTC))
        if kwargs.get("rule") is None:
            kwargs.setdefault("fire_at", fire_at)
        return ReminderRecord(owner_id=owner_id, next_fire_at=fire_at, **kwargs)

    return _make
