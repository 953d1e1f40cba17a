"""Email notifier — sends OTP codes via async SMTP."""

from __future__ import annotations

import logging
from email.message import EmailMessage

import aiosmtplib

from otp_gateway.config import Settings
from otp_gateway.exceptions import NotificationError
from otp_gateway.notifications.base import (
    OTP_MESSAGE_TEMPLATE,
    NotificationChannel,
    Notifier,
)

logger = logging.getLogger(__name__)

SUBJECT = "Your OTP Code"


class EmailNotifier(Notifier):
    """Sends codes using the configured, authenticated SMTP server."""

    def __init__(self, settings: Settings) -> None:
        self._host = settings.smtp_host
        self._port = settings.smtp_port
        self._username = settings.smtp_username or None
        self._password = settings.smtp_password or None
        self._start_tls = settings.smtp_start_tls
        self._from = settings.email_from

    @property
    def channel(self) -> NotificationChannel:
        return NotificationChannel.EMAIL

    def build_message(self, to_email: str, code: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = SUBJECT
        msg["From"] = self._from
        msg["To"] = to_email
        msg.set_content(OTP_MESSAGE_TEMPLATE.format(code=code))
        return msg

    async def send_code(self, recipient: str, code: str) -> None:
        msg = self.build_message(recipient, code)
        logger.info("Sending OTP email to %s", recipient)
        try:
            await aiosmtplib.send(
                msg,
                hostname=self._host,
                port=self._port,
                username=self._username,
                password=self._password,
                start_tls=self._start_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send OTP email to %s: %s", recipient, exc)
            raise NotificationError("Email sending failed") from exc

        logger.info("OTP email sent to %s", recipient)
