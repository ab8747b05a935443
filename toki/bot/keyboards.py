"""Inline keyboard builders."""

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

LABELS = {
    "zh": {"cancel": "🗑 取消提醒", "reactivate": "↩ 復原"},
    "ja": {"cancel": "🗑 取り消す", "reactivate": "↩ 元に戻す"},
}


def _labels(locale: str) -> dict[str, str]:
    return LABELS["ja" if locale == "ja" else "zh"]


def cancel_keyboard(reminder_id: int, locale: str) -> InlineKeyboardMarkup:
    """Keyboard for confirmations and recurring notifications: Cancel."""
    return InlineKeyboardMarkup(
        [[InlineKeyboardButton(_labels(locale)["cancel"], callback_data=f"cancel:{reminder_id}")]]
    )


def reactivate_keyboard(reminder_id: int, locale: str) -> InlineKeyboardMarkup:
    """Keyboard shown after a cancel: Undo."""
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton(
                    _labels(locale)["reactivate"], callback_data=f"reactivate:{reminder_id}"
                )
            ]
        ]
    )
