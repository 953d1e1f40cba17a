"""Telegram notifier — sends OTP codes through the Telegram Bot API."""

from __future__ import annotations

import logging

import httpx

from otp_gateway.config import Settings
from otp_gateway.exceptions import NotificationError
from otp_gateway.notifications.base import (
    OTP_MESSAGE_TEMPLATE,
    NotificationChannel,
    Notifier,
)

logger = logging.getLogger(__name__)


class TelegramNotifier(Notifier):
    """Calls ``<api_url><token>/sendMessage`` with the chat id and text.

    A blank recipient falls back to the configured default chat id.
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = settings.telegram_api_url
        self._token = settings.telegram_token
        self._default_chat_id = settings.telegram_chat_id
        self._transport = transport

    @property
    def channel(self) -> NotificationChannel:
        return NotificationChannel.TELEGRAM

    @property
    def send_message_url(self) -> str:
        return f"{self._api_url}{self._token}/sendMessage"

    async def send_code(self, recipient: str, code: str) -> None:
        chat_id = recipient if recipient and recipient.strip() else self._default_chat_id
        params = {"chat_id": chat_id, "text": OTP_MESSAGE_TEMPLATE.format(code=code)}

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.get(self.send_message_url, params=params)
        except httpx.HTTPError as exc:
            logger.error("Telegram request error for chat %s: %s", chat_id, exc)
            raise NotificationError("Telegram sending failed") from exc

        if resp.status_code != 200:
            logger.error(
                "Telegram API error for chat %s: %s %s", chat_id, resp.status_code, resp.text
            )
            raise NotificationError(f"Telegram API returned {resp.status_code}")

        logger.info("OTP sent via Telegram to chat %s", chat_id)
