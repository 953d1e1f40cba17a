"""Base notifier — the one-method contract every delivery channel implements."""

import enum
from abc import ABC, abstractmethod

OTP_MESSAGE_TEMPLATE = "Your one-time confirmation code is: {code}"


class NotificationChannel(str, enum.Enum):
    """Named delivery transports a client may pick for a code."""

    EMAIL = "EMAIL"
    SMS = "SMS"
    TELEGRAM = "TELEGRAM"
    FILE = "FILE"


class Notifier(ABC):
    """Abstract base class for all OTP delivery transports.

    Implementations load their configuration once, at construction, and
    convert every underlying failure into a ``NotificationError``.
    """

    @property
    @abstractmethod
    def channel(self) -> NotificationChannel:
        """Channel this transport serves (used in logs and routing)."""

    @abstractmethod
    async def send_code(self, recipient: str, code: str) -> None:
        """Deliver *code* to *recipient*.

        Parameters
        ----------
        recipient:
            Channel-specific address: an email address, a phone number,
            a Telegram chat id, or a file path.
        code:
            The OTP code to deliver.
        """
