"""Callback query handlers for inline buttons."""

import logging

from telegram import Update
from telegram.ext import ContextTypes

from toki.bot.formatters import format_cancelled, format_error, format_reactivated
from toki.bot.handlers import get_or_create_user, reply_locale
from toki.bot.keyboards import cancel_keyboard, reactivate_keyboard
from toki.db.repository import Repository
from toki.engine.reminders import cancel_reminder, reactivate_reminder
from toki.utils.errors import TokiError
from toki.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


async def handle_cancel_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE, reminder_id: int
) -> None:
    """Handle 'Cancel' button press."""
    if not update.effective_user or not update.callback_query:
        return

    query = update.callback_query
    repo: Repository = context.bot_data["repo"]
    user = await get_or_create_user(repo, update.effective_user.id)

    try:
        record = await cancel_reminder(repo, user.telegram_id, reminder_id, utc_now())
    except TokiError as e:
        await query.answer(format_error(e, reply_locale(user)))
        return

    if query.message:
        await query.message.edit_text(
            format_cancelled(record),
            parse_mode="HTML",
            reply_markup=reactivate_keyboard(record.id, record.locale),
        )
    await query.answer()


async def handle_reactivate_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE, reminder_id: int
) -> None:
    """Handle 'Undo' button press after a cancel."""
    if not update.effective_user or not update.callback_query:
        return

    query = update.callback_query
    repo: Repository = context.bot_data["repo"]
    user = await get_or_create_user(repo, update.effective_user.id)

    try:
        record = await reactivate_reminder(repo, user.telegram_id, reminder_id, utc_now())
    except TokiError as e:
        await query.answer(format_error(e, reply_locale(user)))
        return

    if query.message:
        await query.message.edit_text(
            format_reactivated(record),
            parse_mode="HTML",
            reply_markup=cancel_keyboard(record.id, record.locale),
        )
    await query.answer()


async def callback_router(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Route callback queries to appropriate handlers."""
    if not update.callback_query:
        return

    query = update.callback_query
    data = query.data

    if not data:
        return

    # Parse callback data: "<action>:<reminder id>"
    action, _, raw_id = data.partition(":")
    try:
        reminder_id = int(raw_id)
    except ValueError:
        logger.warning(f"Malformed callback data: {data!r}")
        await query.answer()
        return

    if action == "cancel":
        await handle_cancel_callback(update, context, reminder_id)
    elif action == "reactivate":
        await handle_reactivate_callback(update, context, reminder_id)
    else:
        await query.answer()
