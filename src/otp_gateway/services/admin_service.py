"""Admin service — OTP configuration and user roster management."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from otp_gateway.database.repository import (
    OtpConfigRepository,
    OtpRepository,
    UserRepository,
)
from otp_gateway.exceptions import BadRequestError, NotFoundError
from otp_gateway.models.otp import OtpConfig
from otp_gateway.models.user import User
from otp_gateway.services.token_registry import TokenRegistry

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        token_registry: TokenRegistry | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._tokens = token_registry

    async def update_otp_config(self, length: int, ttl_seconds: int) -> OtpConfig:
        """Overwrite the singleton config row (creating it if missing)."""
        if length < 1:
            raise BadRequestError("length must be at least 1")
        if ttl_seconds < 1:
            raise BadRequestError("ttlSeconds must be at least 1")

        async with self._session_factory() as session, session.begin():
            configs = OtpConfigRepository(session)
            config = await configs.update(length, ttl_seconds)
            if config is None:
                config = await configs.init_default_if_empty(length, ttl_seconds)

        logger.info("OTP config updated: length=%s ttl=%ss", length, ttl_seconds)
        return config

    async def get_all_users_without_admins(self) -> list[User]:
        async with self._session_factory() as session:
            return await UserRepository(session).list_without_admins()

    async def delete_user_and_codes(self, user_id: int) -> None:
        """Delete a user's OTP codes and then the user, in one transaction."""
        async with self._session_factory() as session, session.begin():
            users = UserRepository(session)
            if await users.get_by_id(user_id) is None:
                raise NotFoundError("User not found")
            deleted_codes = await OtpRepository(session).delete_by_user(user_id)
            await users.delete(user_id)

        if self._tokens is not None:
            self._tokens.revoke_user(user_id)
        logger.info("Deleted user id=%s and %s OTP codes", user_id, deleted_codes)
