"""
Order bot - Main entry point.
"""

import asyncio
import logging
import sys

from aiogram import Bot

from pedidobot.bot.bot import create_bot, create_dispatcher
from pedidobot.bot.messenger import TelegramMessenger
from pedidobot.config import settings
from pedidobot.core.catalog import CatalogLookup
from pedidobot.core.conversation import ConversationEngine, SessionSweeper
from pedidobot.core.orders import LedgerEvent, Order, OrderLedger
from pedidobot.data.assets import clean_folder, download_assets
from pedidobot.data.loaders.catalog_loader import CatalogLoader
from pedidobot.db.sessions import SessionStore
from pedidobot.db.sqlite import db
from pedidobot.integrations.delivery import get_delivery_client


# Fix for Windows asyncio
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def log_ledger_event(event: LedgerEvent, order: Order) -> None:
    """Ledger observer: audit trail in the application log."""
    logger.info(
        f"[{event.value}] {order.order_number} status={order.status.value} "
        f"total={order.payment.total_minor} sender={order.sender}"
    )


def build_engine(bot: Bot, ledger: OrderLedger) -> ConversationEngine:
    """Wire the engine to Telegram, the catalog, the delivery API and the database."""
    loader = CatalogLoader() if settings.spreadsheet_url else None
    return ConversationEngine(
        messenger=TelegramMessenger(bot),
        catalog=CatalogLookup(loader=loader),
        delivery=get_delivery_client(),
        ledger=ledger,
        sessions=SessionStore(db),
    )


async def main() -> None:
    """Main function to run the bot."""
    bot = create_bot()

    ledger = OrderLedger(db)
    ledger.subscribe(log_ledger_event)
    engine = build_engine(bot, ledger)
    sweeper = SessionSweeper(engine)
    dp = create_dispatcher(engine, ledger)

    async def on_startup() -> None:
        """Initialize services on startup."""
        logger.info(f"Starting {settings.business_name} bot...")

        await db.init()
        logger.info("Database initialized")

        clean_folder(settings.media_dir / "maps")
        await download_assets()

        if settings.operator_chat_id is None:
            logger.warning("OPERATOR_CHAT_ID is not set; orders will not be notified")

        sweeper.start()

    async def on_shutdown() -> None:
        """Cleanup on shutdown."""
        logger.info("Shutting down bot...")

        await sweeper.stop()
        await db.close()

        logger.info("Cleanup complete")

    # Register startup/shutdown hooks
    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)

    # Start polling
    logger.info("Bot is starting...")
    try:
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await bot.session.close()


def run() -> None:
    """Console entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
