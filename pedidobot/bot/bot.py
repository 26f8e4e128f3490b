"""
Telegram bot and dispatcher assembly.
"""

from typing import Optional

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from pedidobot.bot.handlers import register_handlers
from pedidobot.config import settings
from pedidobot.core.conversation import ConversationEngine
from pedidobot.core.orders import OrderLedger


def create_bot(token: Optional[str] = None) -> Bot:
    """Bot with HTML parse mode, which every message template relies on."""
    token = token or settings.telegram_bot_token
    if not token:
        raise ValueError("TELEGRAM_BOT_TOKEN is not configured")
    return Bot(
        token=token,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )


def create_dispatcher(engine: ConversationEngine, ledger: OrderLedger) -> Dispatcher:
    """
    Dispatcher with all routers registered.

    Conversation state lives in the engine, so no aiogram FSM storage is used.
    ``engine`` and ``ledger`` are injected into handlers by parameter name.
    """
    dp = Dispatcher()
    dp["engine"] = engine
    dp["ledger"] = ledger
    register_handlers(dp)
    return dp
