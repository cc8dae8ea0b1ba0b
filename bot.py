from aiogram import Bot, Dispatcher
import asyncio
import logging
from typing import Optional
from aiogram.types import BotCommand

from config import Settings
from core.database import MongoDocumentStore
from logging_config import setup_logging
from services.referral_service import ReferralLedgerService

HANDLER_MODULES = [
    "handlers.start",
]

logger = logging.getLogger("dripcoin_bot")


async def set_default_commands(b: Bot):
    """Bot commands visible in the Telegram UI."""
    commands = [
        BotCommand(command="start", description="Start DripCoin Quest"),
    ]
    try:
        await b.set_my_commands(commands)
        logger.debug("Default commands set.")
    except Exception as e:
        logger.warning("Failed to set default commands: %s", e)


def register_handlers(dispatcher: Dispatcher):
    """
    Import and register handler modules.
    Each module must implement `def register(dp: Dispatcher):` function.
    """
    for module_path in HANDLER_MODULES:
        module = __import__(module_path, fromlist=["register"])
        module.register(dispatcher)
        logger.info("Registered handlers from %s", module_path)


def build_dispatcher(settings: Settings, store: MongoDocumentStore) -> Dispatcher:
    """
    Dispatcher with settings and ledger in workflow data, so handlers
    receive them as keyword arguments.
    """
    ledger = ReferralLedgerService(store, settings)
    dp = Dispatcher(settings=settings, ledger=ledger)
    register_handlers(dp)
    return dp


class BotApp:
    """Process lifecycle: startup, run (polling|webhook), shutdown."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.store = MongoDocumentStore(settings)
        self.bot: Optional[Bot] = None
        self.dp: Optional[Dispatcher] = None

    async def on_startup(self):
        """
        Startup tasks:
        - Connect the document store
        - Set default commands
        """
        logger.info("Starting DripCoin Quest bot...")
        try:
            await self.store.connect()
            logger.info("Database connected.")
        except Exception as e:
            logger.exception("Database connection failed: %s", e)
            raise
        await set_default_commands(self.bot)

    async def on_shutdown(self):
        """
        Graceful shutdown:
        - Close DB connection
        - Close bot session
        """
        logger.info("Shutting down DripCoin Quest bot...")
        try:
            await self.store.disconnect()
            logger.info("Database disconnected.")
        except Exception:
            logger.exception("Error disconnecting database.")

        if self.bot:
            try:
                await self.bot.session.close()
                logger.info("Bot session closed.")
            except Exception:
                logger.exception("Error closing bot session.")

    def _build(self):
        self.bot = Bot(token=self.settings.bot_token)
        self.dp = build_dispatcher(self.settings, self.store)

    async def start_polling(self):
        """Start long polling (default development mode)."""
        self._build()
        await self.on_startup()
        logger.info("Starting polling...")
        try:
            await self.bot.delete_webhook(drop_pending_updates=False)
            await self.dp.start_polling(self.bot, handle_signals=True)
        finally:
            await self.on_shutdown()

    async def start_webhook(self):
        """
        Serve Telegram updates on settings.webhook_path through aiohttp.
        Requires WEBHOOK_URL (public base URL).
        """
        from aiohttp import web
        from aiogram.webhook.aiohttp_server import SimpleRequestHandler, setup_application

        if not self.settings.webhook_url:
            raise RuntimeError(
                "WEBHOOK_URL not configured. Use polling or set webhook variables.")

        self._build()
        await self.on_startup()

        webhook_url = self.settings.webhook_url.rstrip("/") + self.settings.webhook_path
        await self.bot.set_webhook(webhook_url)
        logger.info("Webhook set to %s", webhook_url)

        app = web.Application()
        SimpleRequestHandler(dispatcher=self.dp, bot=self.bot).register(app, path=self.settings.webhook_path)
        setup_application(app, self.dp, bot=self.bot)

        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, self.settings.webapp_host, self.settings.webapp_port)
        await site.start()
        logger.info("Server is running on port %s", self.settings.webapp_port)

        try:
            # keep running until cancelled
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            logger.info("Webhook loop cancelled.")
        finally:
            try:
                await self.bot.delete_webhook()
                logger.info("Webhook deleted.")
            except Exception:
                logger.exception("Failed to delete webhook.")
            await runner.cleanup()
            await self.on_shutdown()


def main():
    """
    Entry point. Choose mode based on settings.
    """
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_dir)
    logger.info("Run mode: %s", settings.run_mode)

    app = BotApp(settings)
    runner = app.start_webhook if settings.run_mode == "webhook" else app.start_polling
    try:
        asyncio.run(runner())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user (KeyboardInterrupt).")


if __name__ == "__main__":
    main()
