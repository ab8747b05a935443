"""Main entry point for the Toki bot."""

import logging
import sys

from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    MessageHandler,
    filters,
)

from toki.bot.callbacks import callback_router
from toki.bot.handlers import (
    cancel_command,
    handle_plain_text,
    help_command,
    language_command,
    list_command,
    reactivate_command,
    start_command,
    timezone_command,
)
from toki.bot.notifier import TelegramNotifier
from toki.config import Config
from toki.db.migrations import run_migrations
from toki.db.repository import Repository
from toki.engine.dispatch import Dispatcher, dispatch_job
from toki.utils.error_handler import error_handler

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    stream=sys.stdout,
)

logger = logging.getLogger(__name__)


async def post_init(application: Application) -> None:
    """Initialize bot resources after application is created."""
    # Initialize database
    await run_migrations(Config.DATABASE_PATH)

    # Create repository and store in bot_data
    repo = Repository(Config.DATABASE_PATH)
    await repo.connect()
    application.bot_data["repo"] = repo

    dispatcher = Dispatcher(repo, TelegramNotifier(application.bot))
    application.bot_data["dispatcher"] = dispatcher

    # Start the dispatch job; overdue reminders fire on the first tick
    job_queue = application.job_queue
    if Config.DISPATCH_ENABLED and job_queue:
        job_queue.run_repeating(
            dispatch_job,
            interval=Config.DISPATCH_INTERVAL,
            first=10,  # Start after 10 seconds
            name="dispatch",
            job_kwargs={"max_instances": 1, "coalesce": True},
        )
        logger.info(f"Dispatch job scheduled (interval: {Config.DISPATCH_INTERVAL}s)")
    elif Config.DISPATCH_ENABLED:
        logger.warning("JobQueue unavailable, install python-telegram-bot[job-queue]")

    logger.info("Toki initialized successfully")


async def post_shutdown(application: Application) -> None:
    """Cleanup resources on shutdown."""
    repo: Repository = application.bot_data.get("repo")
    if repo:
        await repo.close()

    logger.info("Toki shut down")


def main() -> None:
    """Start the bot."""
    # Validate configuration
    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    # Create application
    application = (
        Application.builder()
        .token(Config.TELEGRAM_BOT_TOKEN)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )

    # Commands
    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("list", list_command))
    application.add_handler(CommandHandler("cancel", cancel_command))
    application.add_handler(CommandHandler("reactivate", reactivate_command))

    # Settings commands
    application.add_handler(CommandHandler("language", language_command))
    application.add_handler(CommandHandler("timezone", timezone_command))

    # Callback queries (buttons)
    application.add_handler(CallbackQueryHandler(callback_router))

    # Plain text handler (must be last)
    application.add_handler(
        MessageHandler(filters.TEXT & ~filters.COMMAND, handle_plain_text)
    )

    # Error handler
    application.add_error_handler(error_handler)

    # Start the bot
    logger.info("Starting Toki bot...")
    application.run_polling(allowed_updates=["message", "callback_query"])


if __name__ == "__main__":
    main()
