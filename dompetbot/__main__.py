"""
Run the Telegram bot.

    python -m dompetbot
"""

import structlog

from dompetbot.audit import configure_logging
from dompetbot.channels import TelegramChannel
from dompetbot.config import get_settings
from dompetbot.orchestrator import create_app_components


def main() -> None:
    settings = get_settings()
    configure_logging(debug=settings.app.debug_mode)
    logger = structlog.get_logger(__name__)

    orchestrator, store = create_app_components(use_storage=True)
    logger.info("bot_starting", store=type(store).__name__)

    TelegramChannel(orchestrator, settings.telegram).run()


if __name__ == "__main__":
    main()
