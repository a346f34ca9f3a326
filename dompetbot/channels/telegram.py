"""
Telegram channel.

Every text message (slash commands included) is handed to the orchestrator;
whatever it answers is sent back as a reply. Messages it ignores get
nothing.
"""

from typing import Optional

import structlog
from telegram import Update
from telegram.ext import Application, ApplicationBuilder, ContextTypes, MessageHandler, filters

from dompetbot.config import TelegramSettings, get_settings
from dompetbot.models import DEFAULT_SENDER, InboundMessage
from dompetbot.orchestrator import TransactionOrchestrator


logger = structlog.get_logger(__name__)


def sender_name(update: Update) -> str:
    """Display name of whoever sent the message."""
    user = update.effective_user
    if user is None:
        return DEFAULT_SENDER
    if user.username:
        return user.username
    return user.full_name or str(user.id)


class TelegramChannel:
    """Long-polling Telegram bot wired to one orchestrator."""

    def __init__(
        self,
        orchestrator: TransactionOrchestrator,
        settings: Optional[TelegramSettings] = None,
    ):
        self.orchestrator = orchestrator
        self.settings = settings or get_settings().telegram
        self._application: Optional[Application] = None

    def connect(self) -> Application:
        """Build the application and register the message handler."""
        if self._application is None:
            application = ApplicationBuilder().token(self.settings.bot_token).build()
            application.add_handler(MessageHandler(filters.TEXT, self._on_message))
            self._application = application
            logger.info("telegram_connected")
        return self._application

    def run(self) -> None:
        """
        Block and poll for updates until interrupted.

        run_polling initializes the application and shuts it down on exit.
        """
        application = self.connect()
        logger.info("telegram_polling_started")
        application.run_polling(allowed_updates=Update.ALL_TYPES)
        logger.info("telegram_polling_stopped")

    async def _on_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        if message is None or not message.text:
            return

        reply = await self.orchestrator.handle(
            InboundMessage(text=message.text, sender=sender_name(update))
        )
        if reply is not None:
            await message.reply_text(reply)
