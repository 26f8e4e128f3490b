"""
Customer conversation handler - hands every private message to the engine.
"""

import logging

from aiogram import Router, F
from aiogram.enums import ChatType
from aiogram.types import CallbackQuery, Message

from pedidobot.bot.keyboards.replies import REPLY_PREFIX, parse_quick_reply
from pedidobot.bot.messenger import to_inbound
from pedidobot.core.conversation import ConversationEngine, InboundMessage

router = Router(name="conversation")
logger = logging.getLogger(__name__)

# Groups and channels never reach the engine
router.message.filter(F.chat.type == ChatType.PRIVATE)


@router.callback_query(F.data.startswith(REPLY_PREFIX))
async def handle_quick_reply(callback: CallbackQuery, engine: ConversationEngine) -> None:
    """Quick-reply button: processed exactly like the typed answer."""
    reply = parse_quick_reply(callback.data)
    await callback.answer()

    if callback.message is None or callback.message.chat.type != ChatType.PRIVATE:
        return

    # Buttons are single-use
    try:
        await callback.message.edit_reply_markup(reply_markup=None)
    except Exception as e:
        logger.debug(f"Could not remove quick replies: {e}")

    user = callback.from_user
    await engine.handle(InboundMessage(
        sender=str(callback.message.chat.id),
        text=reply,
        display_name=user.full_name,
        from_me=user.is_bot,
    ))


@router.message()
async def handle_message(message: Message, engine: ConversationEngine) -> None:
    """Text, photos and everything else from a customer."""
    inbound = to_inbound(message)
    logger.debug(f"Message from {inbound.sender}: text={inbound.text!r} image={inbound.has_image}")
    await engine.handle(inbound)
