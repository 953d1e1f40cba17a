"""File notifier — appends OTP codes to a local file (dev / audit sink)."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from otp_gateway.clock import Clock
from otp_gateway.exceptions import NotificationError
from otp_gateway.notifications.base import NotificationChannel, Notifier

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class FileNotifier(Notifier):
    """Appends ``<timestamp> - OTP: <code>`` to the file named by the recipient."""

    def __init__(self, clock: Clock) -> None:
        self._clock = clock

    @property
    def channel(self) -> NotificationChannel:
        return NotificationChannel.FILE

    async def send_code(self, recipient: str, code: str) -> None:
        entry = f"{self._clock.now().strftime(TIMESTAMP_FORMAT)} - OTP: {code}\n"
        try:
            await asyncio.to_thread(self._append, Path(recipient), entry)
        except OSError as exc:
            logger.error("Failed to write OTP to file %s: %s", recipient, exc)
            raise NotificationError("File write failed") from exc
        logger.info("OTP written to file %s", recipient)

    @staticmethod
    def _append(path: Path, entry: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(entry)
