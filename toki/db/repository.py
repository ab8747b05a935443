"""Database repository - all SQL queries."""

import functools
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List
from zoneinfo import ZoneInfo

import aiosqlite

from toki.db.models import ReminderRecord, User, rule_from_dict
from toki.utils.constants import AUTO_LOCALE, DEFAULT_TIMEZONE, STATUS_SCHEDULED
from toki.utils.errors import StoreUnavailable
from toki.utils.time_utils import utc_now

logger = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")


def _store_errors(method):
    """Re-raise sqlite failures as StoreUnavailable."""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except aiosqlite.Error as e:
            logger.error(f"Store call {method.__name__} failed: {e}")
            raise StoreUnavailable(f"{method.__name__} failed: {e}") from e

    return wrapper


def _to_db(dt: datetime | None) -> str | None:
    """Serialize an aware datetime as a sortable UTC string."""
    if dt is None:
        return None
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def _from_db(value: str | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromisoformat(value)


class Repository:
    """Database access layer."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open database connection."""
        try:
            self._db = await aiosqlite.connect(self.db_path)
        except aiosqlite.Error as e:
            raise StoreUnavailable(f"Could not open {self.db_path}: {e}") from e
        self._db.row_factory = aiosqlite.Row
        logger.info(f"Connected to database at {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._db:
            await self._db.close()
            self._db = None
            logger.info("Database connection closed")

    @property
    def db(self) -> aiosqlite.Connection:
        """Get the database connection."""
        if self._db is None:
            raise StoreUnavailable("Database not connected")
        return self._db

    # User operations

    @_store_errors
    async def get_user_by_telegram_id(self, telegram_id: int) -> User | None:
        """Get user by Telegram ID."""
        async with self.db.execute(
            "SELECT * FROM users WHERE telegram_id = ?", (telegram_id,)
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return self._row_to_user(row)
            return None

    @_store_errors
    async def create_user(
        self, telegram_id: int, timezone: str = DEFAULT_TIMEZONE, locale: str | None = None
    ) -> User:
        """Create a new user with default settings."""
        async with self.db.execute(
            """
            INSERT INTO users (telegram_id, locale, timezone, created_at)
            VALUES (?, ?, ?, ?)
            RETURNING *
            """,
            (telegram_id, locale, timezone, _to_db(utc_now())),
        ) as cursor:
            row = await cursor.fetchone()
        await self.db.commit()

        logger.info(f"Created user {telegram_id}")
        return self._row_to_user(row)

    @_store_errors
    async def update_user_settings(
        self,
        user_id: int,
        timezone: str | None = None,
        locale: str | None = None,
    ) -> None:
        """Update user settings. ``locale="auto"`` clears the preference."""
        updates = []
        params = []

        if timezone is not None:
            updates.append("timezone = ?")
            params.append(timezone)
        if locale is not None:
            updates.append("locale = ?")
            params.append(None if locale == AUTO_LOCALE else locale)

        if updates:
            params.append(user_id)
            await self.db.execute(
                f"UPDATE users SET {', '.join(updates)} WHERE id = ?", params
            )
            await self.db.commit()

    # Reminder operations

    @_store_errors
    async def create_reminder(self, record: ReminderRecord) -> ReminderRecord:
        """Insert a new reminder and return it with its id."""
        now = _to_db(utc_now())
        async with self.db.execute(
            """
            INSERT INTO reminders (
                owner_id, content, locale, timezone, fire_at, rule, anchor_at,
                status, next_fire_at, last_fired_at, fire_count, source_text,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            RETURNING *
            """,
            (
                record.owner_id,
                record.content,
                record.locale,
                record.timezone,
                _to_db(record.fire_at),
                json.dumps(record.rule.to_dict()) if record.rule else None,
                _to_db(record.anchor_at),
                record.status,
                _to_db(record.next_fire_at),
                _to_db(record.last_fired_at),
                record.fire_count,
                record.source_text,
                _to_db(record.created_at) or now,
                _to_db(record.updated_at) or now,
            ),
        ) as cursor:
            row = await cursor.fetchone()
        await self.db.commit()
        return self._row_to_reminder(row)

    @_store_errors
    async def get_reminder(self, reminder_id: int) -> ReminderRecord | None:
        """Get a reminder by ID."""
        async with self.db.execute(
            "SELECT * FROM reminders WHERE id = ?", (reminder_id,)
        ) as cursor:
            row = await cursor.fetchone()
            if row:
                return self._row_to_reminder(row)
            return None

    @_store_errors
    async def get_reminders_by_owner(
        self, owner_id: int, status: str | None = None
    ) -> List[ReminderRecord]:
        """Get all reminders for an owner, optionally filtered by status."""
        if status:
            query = (
                "SELECT * FROM reminders WHERE owner_id = ? AND status = ? "
                "ORDER BY next_fire_at, id"
            )
            params = (owner_id, status)
        else:
            query = "SELECT * FROM reminders WHERE owner_id = ? ORDER BY id"
            params = (owner_id,)

        async with self.db.execute(query, params) as cursor:
            rows = await cursor.fetchall()
            return [self._row_to_reminder(row) for row in rows]

    @_store_errors
    async def count_scheduled(self, owner_id: int) -> int:
        """Number of scheduled reminders an owner holds."""
        async with self.db.execute(
            "SELECT COUNT(*) FROM reminders WHERE owner_id = ? AND status = ?",
            (owner_id, STATUS_SCHEDULED),
        ) as cursor:
            row = await cursor.fetchone()
            return row[0]

    @_store_errors
    async def get_due_reminders(self, now: datetime) -> List[ReminderRecord]:
        """Get all scheduled reminders whose next fire time is not after ``now``."""
        async with self.db.execute(
            """
            SELECT * FROM reminders
            WHERE status = ?
            AND next_fire_at IS NOT NULL
            AND next_fire_at <= ?
            ORDER BY next_fire_at, id
            """,
            (STATUS_SCHEDULED, _to_db(now)),
        ) as cursor:
            rows = await cursor.fetchall()
            return [self._row_to_reminder(row) for row in rows]

    @_store_errors
    async def update_reminder(self, record: ReminderRecord) -> None:
        """Overwrite every mutable column of a reminder."""
        await self.db.execute(
            """
            UPDATE reminders SET
                content = ?,
                locale = ?,
                timezone = ?,
                fire_at = ?,
                rule = ?,
                anchor_at = ?,
                status = ?,
                next_fire_at = ?,
                last_fired_at = ?,
                fire_count = ?,
                source_text = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                record.content,
                record.locale,
                record.timezone,
                _to_db(record.fire_at),
                json.dumps(record.rule.to_dict()) if record.rule else None,
                _to_db(record.anchor_at),
                record.status,
                _to_db(record.next_fire_at),
                _to_db(record.last_fired_at),
                record.fire_count,
                record.source_text,
                _to_db(record.updated_at or utc_now()),
                record.id,
            ),
        )
        await self.db.commit()

    @_store_errors
    async def save_lifecycle(self, record: ReminderRecord) -> None:
        """Overwrite only the fields the dispatch loop owns."""
        await self.db.execute(
            """
            UPDATE reminders SET
                status = ?,
                next_fire_at = ?,
                last_fired_at = ?,
                fire_count = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                record.status,
                _to_db(record.next_fire_at),
                _to_db(record.last_fired_at),
                record.fire_count,
                _to_db(record.updated_at or utc_now()),
                record.id,
            ),
        )
        await self.db.commit()

    @_store_errors
    async def save_status(self, record: ReminderRecord) -> None:
        """Overwrite only the fields cancel and reactivate change.

        The firing counters are left alone so a concurrent dispatch tick keeps
        its update.
        """
        await self.db.execute(
            """
            UPDATE reminders SET
                status = ?,
                next_fire_at = ?,
                anchor_at = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                record.status,
                _to_db(record.next_fire_at),
                _to_db(record.anchor_at),
                _to_db(record.updated_at or utc_now()),
                record.id,
            ),
        )
        await self.db.commit()

    # Helper methods

    def _row_to_user(self, row: aiosqlite.Row) -> User:
        """Convert a database row to a User object."""
        return User(
            id=row["id"],
            telegram_id=row["telegram_id"],
            locale=row["locale"],
            timezone=row["timezone"],
            created_at=_from_db(row["created_at"]),
        )

    def _row_to_reminder(self, row: aiosqlite.Row) -> ReminderRecord:
        """Convert a database row to a ReminderRecord object."""
        return ReminderRecord(
            id=row["id"],
            owner_id=row["owner_id"],
            content=row["content"],
            locale=row["locale"],
            timezone=row["timezone"],
            fire_at=_from_db(row["fire_at"]),
            rule=rule_from_dict(json.loads(row["rule"])) if row["rule"] else None,
            anchor_at=_from_db(row["anchor_at"]),
            status=row["status"],  # type: ignore
            next_fire_at=_from_db(row["next_fire_at"]),
            last_fired_at=_from_db(row["last_fired_at"]),
            fire_count=row["fire_count"],
            source_text=row["source_text"],
            created_at=_from_db(row["created_at"]),
            updated_at=_from_db(row["updated_at"]),
        )
