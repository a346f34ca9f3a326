"""Chat channel adapters."""

from dompetbot.channels.telegram import TelegramChannel, sender_name

__all__ = ["TelegramChannel", "sender_name"]
