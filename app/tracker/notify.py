"""
Alert sinks. Delivery is best effort: ``send`` reports success as a bool and
never raises for transport problems.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from app.config import Settings

logger = logging.getLogger(__name__)

TELEGRAM_API = "https://api.telegram.org"


class AlertSink(ABC):
    @abstractmethod
    def send(self, message: str) -> bool: ...

    def close(self) -> None:
        pass


class NullSink(AlertSink):
    def send(self, message: str) -> bool:
        logger.info("Alert sink not configured - skipping message")
        return False


class TelegramSink(AlertSink):
    def __init__(
        self,
        token: str,
        chat_id: str,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self.token = token
        self.chat_id = chat_id
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def send(self, message: str) -> bool:
        url = f"{TELEGRAM_API}/bot{self.token}/sendMessage"
        try:
            resp = self._client.post(
                url,
                json={"chat_id": self.chat_id, "text": message, "parse_mode": "HTML"},
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Telegram delivery failed: %s", e)
            return False
        logger.info("Telegram alert delivered to chat %s", self.chat_id)
        return True

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


def build_sink(settings: Settings) -> AlertSink:
    if settings.TELEGRAM_BOT_TOKEN and settings.TELEGRAM_CHAT_ID:
        return TelegramSink(settings.TELEGRAM_BOT_TOKEN, settings.TELEGRAM_CHAT_ID)
    return NullSink()
