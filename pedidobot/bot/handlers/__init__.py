"""
Bot handlers registration.
"""

from aiogram import Dispatcher

from pedidobot.bot.handlers.start import router as start_router
from pedidobot.bot.handlers.operator import router as operator_router
from pedidobot.bot.handlers.conversation import router as conversation_router


def register_handlers(dp: Dispatcher) -> None:
    """Register all handlers to dispatcher."""
    # Order matters! Commands first, the catch-all conversation handler last
    dp.include_router(start_router)
    dp.include_router(operator_router)
    dp.include_router(conversation_router)
