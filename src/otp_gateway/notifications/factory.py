"""Notifier factory — maps a channel to its constructed transport."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from otp_gateway.clock import Clock
from otp_gateway.config import Settings
from otp_gateway.exceptions import BadRequestError
from otp_gateway.notifications.base import NotificationChannel, Notifier
from otp_gateway.notifications.emailer import EmailNotifier
from otp_gateway.notifications.file import FileNotifier
from otp_gateway.notifications.sms import SmsNotifier
from otp_gateway.notifications.telegram import TelegramNotifier

logger = logging.getLogger(__name__)


class NotifierFactory:
    """Holds one transport per channel, built once and reused across requests."""

    def __init__(self, notifiers: Iterable[Notifier]) -> None:
        self._notifiers: dict[NotificationChannel, Notifier] = {
            notifier.channel: notifier for notifier in notifiers
        }

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock) -> NotifierFactory:
        return cls(
            [
                EmailNotifier(settings),
                SmsNotifier(settings),
                TelegramNotifier(settings),
                FileNotifier(clock),
            ]
        )

    @property
    def channels(self) -> list[NotificationChannel]:
        return list(self._notifiers)

    def get(self, channel: NotificationChannel) -> Notifier:
        """Return the transport registered for *channel*."""
        try:
            return self._notifiers[channel]
        except KeyError:
            logger.error("No notifier registered for channel %s", channel)
            raise BadRequestError(f"Unsupported channel: {channel}") from None
