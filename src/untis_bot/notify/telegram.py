"""
Telegram Bot API client.

Sends notifications via Telegram Bot API.
https://core.telegram.org/bots/api
"""

import logging
from typing import Optional

import requests

from untis_bot.config import Settings, get_settings
from untis_bot.errors import DeliveryError

logger = logging.getLogger(__name__)

# Telegram Bot API endpoint
TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"


class TelegramNotifier:
    """
    Telegram Bot API client for sending notifications.

    Uses Telegram's Bot API to send plain text messages to a configured
    chat (user, group, or channel).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        token: Optional[str] = None,
        chat_id: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize Telegram notifier.

        Args:
            settings: Optional settings instance, will use default if not provided
            token: Overrides the configured bot token
            chat_id: Overrides the configured chat ID
            session: Optional requests session (mainly for tests)
        """
        settings = settings or get_settings()

        self.token = token or settings.telegram_bot_token
        self.chat_id = chat_id or settings.telegram_chat_id
        self.timeout = settings.request_timeout

        self.api_url = TELEGRAM_API_URL.format(token=self.token)
        self.session = session or requests.Session()

    def send_message(self, message: str) -> None:
        """
        Send a text message via Telegram.

        Args:
            message: The message text to send

        Raises:
            DeliveryError: If the request fails or Telegram rejects it
        """
        payload = {
            "chat_id": self.chat_id,
            "text": message,
        }

        try:
            response = self.session.post(self.api_url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise DeliveryError("Telegram API request timed out") from e
        except requests.exceptions.RequestException as e:
            raise DeliveryError(f"Telegram API request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise DeliveryError(
                f"Telegram API error: {response.status_code} - {response.text}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise DeliveryError("Telegram API returned a non-JSON body") from e

        if not data.get("ok"):
            raise DeliveryError(f"Telegram API error: {data.get('description')}")

        message_id = data.get("result", {}).get("message_id", "unknown")
        logger.info(f"Telegram message sent successfully: {message_id}")
