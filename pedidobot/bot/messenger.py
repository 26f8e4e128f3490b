"""
Telegram transport for the conversation engine.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from aiogram import Bot
from aiogram.enums import ChatType
from aiogram.types import BufferedInputFile, FSInputFile, Message

from pedidobot.bot.keyboards.replies import get_quick_reply_keyboard
from pedidobot.core.conversation.messenger import BaseMessenger, ImageSource
from pedidobot.core.conversation.models import InboundMessage

logger = logging.getLogger(__name__)


def is_image_document(message: Message) -> bool:
    document = message.document
    return bool(document and document.mime_type and document.mime_type.startswith("image/"))


def to_inbound(message: Message, text: Optional[str] = None) -> InboundMessage:
    """
    Build the channel-independent view of a Telegram message.

    Args:
        message: Received aiogram message
        text: Text override (used for quick-reply button presses)
    """
    user = message.from_user
    contact = message.contact
    return InboundMessage(
        sender=str(message.chat.id),
        text=text if text is not None else (message.text or message.caption),
        has_image=bool(message.photo) or is_image_document(message),
        display_name=user.full_name if user else None,
        is_group_or_broadcast=message.chat.type != ChatType.PRIVATE,
        from_me=user is None or user.is_bot,
        phone=contact.phone_number if contact else None,
        message_id=str(message.message_id),
        raw=message,
    )


class TelegramMessenger(BaseMessenger):
    """Outbound messaging through the Bot API."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send_text(
        self,
        to: str,
        text: str,
        quick_replies: Optional[Sequence[str]] = None,
    ) -> None:
        await self.bot.send_message(
            chat_id=int(to),
            text=text,
            reply_markup=get_quick_reply_keyboard(quick_replies) if quick_replies else None,
        )

    async def send_image(self, to: str, image: ImageSource, caption: Optional[str] = None) -> None:
        if isinstance(image, bytes):
            photo = BufferedInputFile(image, filename="image.jpg")
        elif isinstance(image, Path):
            photo = FSInputFile(image)
        else:
            # URL, fetched by Telegram
            photo = image
        await self.bot.send_photo(chat_id=int(to), photo=photo, caption=caption)

    async def send_document(
        self,
        to: str,
        document: Path,
        caption: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> None:
        await self.bot.send_document(
            chat_id=int(to),
            document=FSInputFile(document, filename=filename or document.name),
            caption=caption,
        )

    async def forward(self, to: str, message: InboundMessage) -> None:
        await self.bot.forward_message(
            chat_id=int(to),
            from_chat_id=int(message.sender),
            message_id=int(message.message_id),
        )

    async def download_image(self, message: InboundMessage, thumbnail: bool = False) -> Optional[bytes]:
        raw: Optional[Message] = message.raw
        if raw is None:
            return None

        file_id = None
        if raw.photo:
            # Sizes are ordered from smallest to largest
            file_id = raw.photo[0].file_id if thumbnail else raw.photo[-1].file_id
        elif is_image_document(raw):
            if thumbnail:
                file_id = raw.document.thumbnail.file_id if raw.document.thumbnail else None
            else:
                file_id = raw.document.file_id

        if file_id is None:
            return None

        buffer = await self.bot.download(file_id)
        logger.debug(f"Downloaded {'thumbnail' if thumbnail else 'image'} from {message.sender}")
        return buffer.getvalue() if buffer else None
