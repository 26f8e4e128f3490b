"""
Inline quick-reply keyboards.
"""

from typing import Optional, Sequence

from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.utils.keyboard import InlineKeyboardBuilder

REPLY_PREFIX = "reply:"

REPLY_ICONS = {
    "si": "✅",
    "no": "❌",
}


def get_quick_reply_keyboard(replies: Sequence[str]) -> Optional[InlineKeyboardMarkup]:
    """One row of buttons; pressing one is handled as typing its text."""
    if not replies:
        return None

    builder = InlineKeyboardBuilder()
    builder.row(*[
        InlineKeyboardButton(
            text=f"{REPLY_ICONS.get(reply.lower(), '')} {reply}".strip(),
            callback_data=f"{REPLY_PREFIX}{reply}",
        )
        for reply in replies
    ])
    return builder.as_markup()


def parse_quick_reply(callback_data: Optional[str]) -> Optional[str]:
    """Text carried by a quick-reply button, or None for other callbacks."""
    if not callback_data or not callback_data.startswith(REPLY_PREFIX):
        return None
    return callback_data[len(REPLY_PREFIX):]
