"""Telegram Bot API integration for accountabot."""

import logging
import os
from typing import Optional

import requests
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"


class TelegramClient:
    """Message delivery transport backed by the Telegram Bot API."""

    def __init__(self, bot_token: Optional[str] = None, timeout: float = 10):
        """Initialize Telegram client.

        Args:
            bot_token: Bot token. If None, reads from TELEGRAM_BOT_TOKEN env var.
            timeout: Per-request timeout in seconds

        Raises:
            ValueError: If no bot token is configured
        """
        self.bot_token = bot_token or os.getenv("TELEGRAM_BOT_TOKEN")
        if not self.bot_token:
            raise ValueError("Telegram bot token is required. Set TELEGRAM_BOT_TOKEN env var.")
        self.timeout = timeout

    def send(self, chat_id: str, text: str) -> bool:
        """Send an HTML-formatted message to a chat.

        Any transport or API failure is reported as False; this never raises.
        """
        url = f"{TELEGRAM_API_BASE}/bot{self.bot_token}/sendMessage"
        payload = {"chat_id": chat_id, "text": text, "parse_mode": "HTML"}
        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Failed to send Telegram message to chat {chat_id}: {type(e).__name__}: {str(e)}")
            return False

        if not response.ok or data.get("ok") is not True:
            logger.error(f"Telegram rejected message to chat {chat_id}: {data.get('description', response.status_code)}")
            return False
        return True
