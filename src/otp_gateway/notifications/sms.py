"""SMS notifier — submits OTP codes to an SMSC over SMPP.

smpplib is blocking, so each delivery runs the whole
bind / submit / unbind exchange in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging

import smpplib.client
import smpplib.consts
import smpplib.exceptions

from otp_gateway.config import Settings
from otp_gateway.exceptions import NotificationError
from otp_gateway.notifications.base import NotificationChannel, Notifier

logger = logging.getLogger(__name__)

SMS_TEMPLATE = "Your OTP code: {code}"


class SmsNotifier(Notifier):
    """Binds as a transmitter, submits one short message, then unbinds."""

    def __init__(self, settings: Settings) -> None:
        self._host = settings.smpp_host
        self._port = settings.smpp_port
        self._system_id = settings.smpp_system_id
        self._password = settings.smpp_password
        self._system_type = settings.smpp_system_type
        self._source_addr = settings.smpp_source_addr

    @property
    def channel(self) -> NotificationChannel:
        return NotificationChannel.SMS

    async def send_code(self, recipient: str, code: str) -> None:
        await asyncio.to_thread(self._submit, recipient, SMS_TEMPLATE.format(code=code))
        logger.info("OTP sent via SMS to %s", recipient)

    def _submit(self, phone: str, text: str) -> None:
        client = smpplib.client.Client(self._host, self._port)
        bound = False
        try:
            client.connect()
            # A non-zero bind status is raised by smpplib as PDUError
            client.bind_transmitter(
                system_id=self._system_id,
                password=self._password,
                system_type=self._system_type,
                address_range=self._source_addr,
            )
            bound = True
            client.send_message(
                source_addr_ton=smpplib.consts.SMPP_TON_ALNUM,
                source_addr=self._source_addr,
                dest_addr_ton=smpplib.consts.SMPP_TON_INTL,
                destination_addr=phone,
                short_message=text.encode("utf-8"),
            )
        except (smpplib.exceptions.PDUError, smpplib.exceptions.ConnectionError, OSError) as exc:
            logger.error("Failed to send SMS to %s: %s", phone, exc)
            raise NotificationError(f"SMS sending failed: {exc}") from exc
        finally:
            self._close(client, bound)

    @staticmethod
    def _close(client: smpplib.client.Client, bound: bool) -> None:
        try:
            if bound:
                client.unbind()
        except (smpplib.exceptions.PDUError, smpplib.exceptions.ConnectionError, OSError):
            logger.debug("SMPP unbind failed", exc_info=True)
        finally:
            client.disconnect()
