"""Dispatch loop - the periodic tick that fires due reminders."""

import asyncio
import logging
from datetime import datetime
from typing import List, Protocol

from telegram.ext import ContextTypes

from toki.bot.formatters import format_notification
from toki.db.models import DispatchResult, ReminderRecord
from toki.db.repository import Repository
from toki.engine.lifecycle import mark_fired
from toki.utils.constants import (
    OUTCOME_DELIVERED,
    OUTCOME_DELIVERY_FAILED,
    OUTCOME_STORE_FAILED,
)
from toki.utils.errors import DeliveryFailure, StoreUnavailable
from toki.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def send(
        self,
        owner_id: int,
        message: str,
        reminder_id: int | None = None,
        locale: str | None = None,
    ) -> None:
        ...


class Dispatcher:
    """Fires due reminders once per due instant and advances their schedule.

    Ticks are single-flight: a tick that starts while the previous one is
    still running is skipped.
    """

    def __init__(self, repo: Repository, notifier: Notifier):
        self.repo = repo
        self.notifier = notifier
        self._lock = asyncio.Lock()

    async def run_dispatch_tick(self, now: datetime | None = None) -> List[DispatchResult]:
        """Run one tick.

        1. Load scheduled reminders whose next fire time is not after ``now``
        2. For each one: mark it fired, send it, save the lifecycle fields
        3. Report what happened to each record
        """
        if self._lock.locked():
            logger.warning("Previous dispatch tick still running, skipping this one")
            return []

        async with self._lock:
            now = now or utc_now()

            try:
                due = await self.repo.get_due_reminders(now)
            except StoreUnavailable as e:
                logger.error(f"Dispatch tick could not load due reminders: {e}")
                return []

            if not due:
                return []

            logger.info(f"Dispatch tick: {len(due)} reminders due")

            results = []
            for record in due:
                try:
                    results.append(await self._fire(record, now))
                except Exception as e:
                    logger.error(f"Error processing reminder {record.id}: {e}")
                    continue

            return results

    async def _fire(self, record: ReminderRecord, now: datetime) -> DispatchResult:
        fired = mark_fired(record, now)
        outcome, error = OUTCOME_DELIVERED, None

        try:
            await self.notifier.send(
                record.owner_id,
                format_notification(fired),
                reminder_id=record.id if record.is_recurring else None,
                locale=record.locale,
            )
        except DeliveryFailure as e:
            # Fire-and-forget: the schedule still advances
            logger.error(f"Failed to deliver reminder {record.id}: {e}")
            outcome, error = OUTCOME_DELIVERY_FAILED, str(e)

        try:
            await self.repo.save_lifecycle(fired)
        except StoreUnavailable as e:
            # Stored record is untouched, so the next tick sees it as due again
            logger.error(f"Failed to save reminder {record.id} after firing: {e}")
            return DispatchResult(record, OUTCOME_STORE_FAILED, str(e))

        logger.info(
            f"Fired reminder {record.id} ({outcome}, count: {fired.fire_count}, "
            f"next: {fired.next_fire_at})"
        )
        return DispatchResult(fired, outcome, error)


async def dispatch_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """JobQueue callback for the dispatch tick."""
    dispatcher: Dispatcher = context.bot_data["dispatcher"]
    await dispatcher.run_dispatch_tick()
