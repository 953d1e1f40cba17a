"""OTP service — generates, delivers, validates and expires one-time codes."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Callable
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from otp_gateway.clock import Clock, as_utc
from otp_gateway.database.repository import (
    OtpConfigRepository,
    OtpRepository,
    UserRepository,
)
from otp_gateway.exceptions import BadRequestError, NotFoundError
from otp_gateway.models.otp import Otp, OtpConfig, OtpStatus
from otp_gateway.notifications.base import NotificationChannel
from otp_gateway.notifications.factory import NotifierFactory

logger = logging.getLogger(__name__)


def _random_digit() -> int:
    return secrets.randbelow(10)


class OtpService:
    """Owns the OTP lifecycle.

    A code is born ACTIVE and ends either USED (validated once) or
    EXPIRED (swept, or detected stale during validation). Expiry is
    always measured against the TTL in the config row at the time of
    the check, not the TTL in force when the code was issued.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifier_factory: NotifierFactory,
        clock: Clock,
        digit_source: Callable[[], int] = _random_digit,
    ) -> None:
        self._session_factory = session_factory
        self._notifiers = notifier_factory
        self._clock = clock
        self._digit_source = digit_source

    async def get_config(self) -> OtpConfig:
        async with self._session_factory() as session:
            return await self._require_config(session)

    async def generate(self, user_id: int, operation_id: str | None) -> str:
        """Draw a fresh code and persist it as ACTIVE; return the code."""
        async with self._session_factory() as session, session.begin():
            config = await self._require_config(session)
            code = "".join(str(self._digit_source()) for _ in range(config.length))
            otp = Otp(
                user_id=user_id,
                operation_id=operation_id,
                code=code,
                status=OtpStatus.ACTIVE,
                created_at=self._clock.now(),
            )
            await OtpRepository(session).add(otp)

        logger.info(
            "Generated OTP id=%s for user_id=%s operation_id=%s", otp.id, user_id, operation_id
        )
        logger.debug("OTP id=%s code=%s", otp.id, code)
        return code

    async def send_otp_to_user(
        self, user_id: int, operation_id: str | None, channel: NotificationChannel
    ) -> None:
        """Generate a code for *user_id* and deliver it over *channel*.

        The user and the channel are resolved before any code is stored, so
        an unknown user or channel leaves no row behind. Once stored, the row
        is kept even if delivery fails; it will either be used or swept as
        expired.
        """
        async with self._session_factory() as session:
            user = await UserRepository(session).get_by_id(user_id)
        if user is None:
            logger.warning("send_otp_to_user: user not found, id=%s", user_id)
            raise BadRequestError("User not found")

        notifier = self._notifiers.get(channel)
        code = await self.generate(user_id, operation_id)
        await notifier.send_code(user.username, code)
        logger.info("Sent OTP to user_id=%s via %s", user_id, channel.value)

    async def validate_otp(self, code: str) -> bool:
        """Consume *code* if it is ACTIVE and within its TTL."""
        async with self._session_factory() as session, session.begin():
            otps = OtpRepository(session)
            otp = await otps.get_by_code(code)
            if otp is None:
                logger.warning("validate_otp: code not found")
                return False
            if otp.status != OtpStatus.ACTIVE:
                logger.warning(
                    "validate_otp: OTP id=%s is not active (status=%s)", otp.id, otp.status.value
                )
                return False

            config = await self._require_config(session)
            ttl = timedelta(seconds=config.ttl_seconds)
            now = self._clock.now()
            expires_at = as_utc(otp.created_at) + ttl
            if now > expires_at:
                expired = await otps.mark_as_expired(now - ttl)
                logger.warning(
                    "validate_otp: OTP id=%s expired at %s (%s rows expired)",
                    otp.id,
                    expires_at,
                    expired,
                )
                return False

            if not await otps.mark_as_used(otp.id):
                logger.warning("validate_otp: OTP id=%s was consumed concurrently", otp.id)
                return False

        logger.info("validate_otp: OTP id=%s validated and marked USED", otp.id)
        return True

    async def mark_expired_otps(self) -> int:
        """Flip every ACTIVE code older than the current TTL to EXPIRED."""
        async with self._session_factory() as session, session.begin():
            config = await self._require_config(session)
            threshold = self._clock.now() - timedelta(seconds=config.ttl_seconds)
            expired = await OtpRepository(session).mark_as_expired(threshold)

        logger.info(
            "mark_expired_otps: %s codes older than %ss expired", expired, config.ttl_seconds
        )
        return expired

    @staticmethod
    async def _require_config(session: AsyncSession) -> OtpConfig:
        config = await OtpConfigRepository(session).get()
        if config is None:
            raise NotFoundError("OTP configuration not found")
        return config
