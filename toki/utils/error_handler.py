"""Global error handler for the bot."""

import logging
import traceback

from telegram import Update
from telegram.error import NetworkError, TimedOut
from telegram.ext import ContextTypes

from toki.config import Config
from toki.parser.patterns import detect_locale
from toki.utils.errors import StoreUnavailable

logger = logging.getLogger(__name__)

APOLOGIES = {
    "zh": {
        "generic": "😅 發生錯誤了，已記錄下來。請再試一次或輸入 /help。",
        "store": "💾 暫時無法存取資料，請稍後再試。",
        "network": "🌐 網路錯誤，請稍後再試。",
    },
    "ja": {
        "generic": "😅 エラーが発生しました。記録済みです。もう一度試すか /help を送ってください。",
        "store": "💾 データにアクセスできません。しばらくしてからお試しください。",
        "network": "🌐 ネットワークエラーです。しばらくしてからお試しください。",
    },
}


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle errors in the bot."""
    # Log the error
    logger.error("Exception while handling an update:", exc_info=context.error)

    # Log full traceback
    tb_list = traceback.format_exception(None, context.error, context.error.__traceback__)
    logger.error(f"Traceback:\n{''.join(tb_list)}")

    # Try to notify the user
    if isinstance(update, Update) and update.effective_message:
        text = update.effective_message.text or ""
        locale = detect_locale(text, default=Config.DEFAULT_LOCALE)
        messages = APOLOGIES["ja" if locale == "ja" else "zh"]

        error = context.error
        if isinstance(error, StoreUnavailable):
            message = messages["store"]
        elif isinstance(error, (NetworkError, TimedOut)):
            message = messages["network"]
        else:
            message = messages["generic"]

        try:
            await update.effective_message.reply_text(message)
        except Exception as e:
            logger.error(f"Failed to send error message to user: {e}")
