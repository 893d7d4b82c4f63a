"""Telegram notification module for the cancellation bot."""

from untis_bot.notify.telegram import TelegramNotifier
from untis_bot.notify.formatters import MessageComposer, PERIOD_TABLE

__all__ = ["TelegramNotifier", "MessageComposer", "PERIOD_TABLE"]
