"""Outbound notifications over Telegram."""

import logging

from telegram import Bot
from telegram.error import TelegramError

from toki.bot.keyboards import cancel_keyboard
from toki.config import Config
from toki.utils.errors import DeliveryFailure

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Sends reminder notifications to a Telegram chat."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send(
        self,
        owner_id: int,
        message: str,
        reminder_id: int | None = None,
        locale: str | None = None,
    ) -> None:
        """Send ``message`` to the owner's chat.

        With ``reminder_id`` the message carries a cancel button.

        Raises:
            DeliveryFailure: Telegram rejected or failed the send
        """
        markup = None
        if reminder_id is not None:
            markup = cancel_keyboard(reminder_id, locale or Config.DEFAULT_LOCALE)

        try:
            await self.bot.send_message(
                chat_id=owner_id,
                text=message,
                parse_mode="HTML",
                reply_markup=markup,
            )
        except TelegramError as e:
            raise DeliveryFailure(f"Could not send to {owner_id}: {e}") from e

        logger.debug(f"Sent notification to {owner_id}")
