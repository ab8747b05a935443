"""Command handlers."""

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from telegram import Update
from telegram.ext import ContextTypes

from toki.bot.formatters import (
    format_cancelled,
    format_created,
    format_error,
    format_help_message,
    format_message,
    format_reactivated,
    format_reminder_list,
    format_welcome_message,
)
from toki.bot.keyboards import cancel_keyboard, reactivate_keyboard
from toki.config import Config
from toki.db.models import User
from toki.db.repository import Repository
from toki.engine.reminders import (
    cancel_reminder,
    create_reminder,
    list_reminders,
    reactivate_reminder,
)
from toki.parser.patterns import canonical_locale, detect_locale
from toki.utils.constants import AUTO_LOCALE
from toki.utils.errors import TokiError
from toki.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


async def get_or_create_user(repo: Repository, telegram_id: int) -> User:
    """Fetch the user, creating one with the configured defaults on first contact."""
    user = await repo.get_user_by_telegram_id(telegram_id)
    if user is None:
        user = await repo.create_user(telegram_id, timezone=Config.TIMEZONE)
        logger.info(f"New user created: {telegram_id}")
    return user


def reply_locale(user: User, text: str = "") -> str:
    """Locale for replies: the user's preference, else detected from ``text``."""
    return user.locale or detect_locale(text, default=Config.DEFAULT_LOCALE)


def _parse_id(context: ContextTypes.DEFAULT_TYPE) -> int | None:
    if not context.args or len(context.args) != 1:
        return None
    try:
        return int(context.args[0].lstrip("#"))
    except ValueError:
        return None


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command."""
    if not update.effective_user or not update.message:
        return

    repo: Repository = context.bot_data["repo"]
    user = await get_or_create_user(repo, update.effective_user.id)

    await update.message.reply_html(format_welcome_message(reply_locale(user)))


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command."""
    if not update.effective_user or not update.message:
        return

    repo: Repository = context.bot_data["repo"]
    user = await get_or_create_user(repo, update.effective_user.id)

    await update.message.reply_html(format_help_message(reply_locale(user)))


async def list_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /list [all] command."""
    if not update.effective_user or not update.message:
        return

    repo: Repository = context.bot_data["repo"]
    user = await get_or_create_user(repo, update.effective_user.id)
    locale = reply_locale(user)
    include_inactive = bool(context.args) and context.args[0].lower() == "all"

    try:
        records = await list_reminders(repo, user.telegram_id, include_inactive=include_inactive)
    except TokiError as e:
        await update.message.reply_html(format_error(e, locale))
        return

    await update.message.reply_html(format_reminder_list(records, locale))


async def cancel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /cancel <id> command."""
    if not update.effective_user or not update.message:
        return

    repo: Repository = context.bot_data["repo"]
    user = await get_or_create_user(repo, update.effective_user.id)
    locale = reply_locale(user)

    reminder_id = _parse_id(context)
    if reminder_id is None:
        await update.message.reply_html(format_message("usage_cancel", locale))
        return

    try:
        record = await cancel_reminder(repo, user.telegram_id, reminder_id, utc_now())
    except TokiError as e:
        await update.message.reply_html(format_error(e, locale))
        return

    await update.message.reply_html(
        format_cancelled(record), reply_markup=reactivate_keyboard(record.id, record.locale)
    )


async def reactivate_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /reactivate <id> command."""
    if not update.effective_user or not update.message:
        return

    repo: Repository = context.bot_data["repo"]
    user = await get_or_create_user(repo, update.effective_user.id)
    locale = reply_locale(user)

    reminder_id = _parse_id(context)
    if reminder_id is None:
        await update.message.reply_html(format_message("usage_reactivate", locale))
        return

    try:
        record = await reactivate_reminder(repo, user.telegram_id, reminder_id, utc_now())
    except TokiError as e:
        await update.message.reply_html(format_error(e, locale))
        return

    await update.message.reply_html(
        format_reactivated(record), reply_markup=cancel_keyboard(record.id, record.locale)
    )


async def language_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /language <zh|ja|auto> command."""
    if not update.effective_user or not update.message:
        return

    repo: Repository = context.bot_data["repo"]
    user = await get_or_create_user(repo, update.effective_user.id)

    if not context.args or len(context.args) != 1:
        await update.message.reply_html(format_message("usage_language", reply_locale(user)))
        return

    choice = context.args[0].lower()
    try:
        locale = AUTO_LOCALE if choice == AUTO_LOCALE else canonical_locale(choice)
    except TokiError as e:
        await update.message.reply_html(format_error(e, reply_locale(user)))
        return

    await repo.update_user_settings(user.id, locale=locale)  # type: ignore

    shown = Config.DEFAULT_LOCALE if locale == AUTO_LOCALE else locale
    await update.message.reply_html(format_message("language_set", shown, locale))


async def timezone_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /timezone <timezone> command."""
    if not update.effective_user or not update.message:
        return

    repo: Repository = context.bot_data["repo"]
    user = await get_or_create_user(repo, update.effective_user.id)
    locale = reply_locale(user)

    # If no timezone provided, show current
    if not context.args:
        await update.message.reply_html(format_message("timezone_current", locale, user.timezone))
        return

    new_timezone = context.args[0]

    # Validate timezone
    try:
        ZoneInfo(new_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        await update.message.reply_html(format_message("invalid_timezone", locale, new_timezone))
        return

    await repo.update_user_settings(user.id, timezone=new_timezone)  # type: ignore

    await update.message.reply_html(format_message("timezone_set", locale, new_timezone))


async def handle_plain_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle plain text messages: every message becomes a reminder."""
    if not update.effective_user or not update.message or not update.message.text:
        return

    repo: Repository = context.bot_data["repo"]
    user = await get_or_create_user(repo, update.effective_user.id)
    text = update.message.text

    try:
        record = await create_reminder(
            repo,
            owner_id=user.telegram_id,
            text=text,
            locale=user.locale,
            now=utc_now(),
            tz=user.timezone,
            fallback_minutes=Config.FALLBACK_OFFSET_MINUTES,
        )
    except TokiError as e:
        await update.message.reply_html(format_error(e, reply_locale(user, text)))
        return

    await update.message.reply_html(
        format_created(record), reply_markup=cancel_keyboard(record.id, record.locale)
    )
