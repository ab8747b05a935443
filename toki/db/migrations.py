"""Database migration runner."""

import logging
from pathlib import Path

import aiosqlite

from toki.utils.errors import StoreUnavailable

logger = logging.getLogger(__name__)


async def init_database(db_path: Path) -> None:
    """Create the users and reminders tables if they do not exist."""
    schema_path = Path(__file__).parent / "schema.sql"
    schema_sql = schema_path.read_text(encoding="utf-8")

    try:
        async with aiosqlite.connect(db_path) as db:
            await db.executescript(schema_sql)
            await db.commit()
    except aiosqlite.Error as e:
        raise StoreUnavailable(f"Could not initialize database at {db_path}: {e}") from e

    logger.info(f"Database initialized at {db_path}")


async def run_migrations(db_path: Path) -> None:
    """Run any pending migrations.

    The schema is still at its first version, so this only initializes it.
    """
    await init_database(db_path)
