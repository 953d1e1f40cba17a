"""Repositories — data access layer for users, OTP codes and OTP config.

Each repository wraps an ``AsyncSession`` supplied by the caller; the
caller owns the unit of work (commit / rollback).
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from otp_gateway.models.otp import Otp, OtpConfig, OtpStatus
from otp_gateway.models.user import User, UserRole

logger = logging.getLogger(__name__)


class UserRepository:
    """Encapsulates all database queries related to users."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, user: User) -> User:
        """Insert *user* and populate its generated id."""
        self._session.add(user)
        await self._session.flush()
        return user

    async def get_by_id(self, user_id: int) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def admin_exists(self) -> bool:
        stmt = select(func.count()).select_from(User).where(User.role == UserRole.ADMIN)
        result = await self._session.execute(stmt)
        return result.scalar_one() > 0

    async def list_without_admins(self) -> list[User]:
        stmt = select(User).where(User.role != UserRole.ADMIN).order_by(User.id)
        result = await self._session.execute(stmt)
        return list(result.scalars())

    async def delete(self, user_id: int) -> bool:
        """Delete the user row; return ``False`` if there was none."""
        result = await self._session.execute(delete(User).where(User.id == user_id))
        return result.rowcount > 0


class OtpRepository:
    """Queries and bulk status transitions for ``otp_codes``."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, otp: Otp) -> Otp:
        self._session.add(otp)
        await self._session.flush()
        return otp

    async def get_by_code(self, code: str) -> Otp | None:
        """Return the most recently issued row carrying *code*.

        Codes are not globally unique; the newest match is authoritative.
        """
        stmt = (
            select(Otp)
            .where(Otp.code == code)
            .order_by(Otp.created_at.desc(), Otp.id.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_user(self, user_id: int) -> list[Otp]:
        stmt = select(Otp).where(Otp.user_id == user_id).order_by(Otp.id)
        result = await self._session.execute(stmt)
        return list(result.scalars())

    async def mark_as_used(self, otp_id: int) -> bool:
        """Flip an ACTIVE row to USED.

        The update is conditional on the row still being ACTIVE, so of two
        concurrent callers only one sees an affected row.
        """
        stmt = (
            update(Otp)
            .where(Otp.id == otp_id, Otp.status == OtpStatus.ACTIVE)
            .values(status=OtpStatus.USED)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def mark_as_expired(self, threshold: datetime) -> int:
        """Expire every ACTIVE row created before *threshold* in one statement."""
        stmt = (
            update(Otp)
            .where(Otp.status == OtpStatus.ACTIVE, Otp.created_at < threshold)
            .values(status=OtpStatus.EXPIRED)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount

    async def delete_by_user(self, user_id: int) -> int:
        result = await self._session.execute(delete(Otp).where(Otp.user_id == user_id))
        return result.rowcount


class OtpConfigRepository:
    """Access to the single ``otp_config`` row."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self) -> OtpConfig | None:
        stmt = select(OtpConfig).order_by(OtpConfig.id).limit(1)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, length: int, ttl_seconds: int) -> OtpConfig | None:
        """Overwrite length and TTL; return ``None`` if the row is missing."""
        config = await self.get()
        if config is None:
            return None
        config.length = length
        config.ttl_seconds = ttl_seconds
        await self._session.flush()
        return config

    async def init_default_if_empty(self, length: int, ttl_seconds: int) -> OtpConfig:
        existing = await self.get()
        if existing is not None:
            return existing
        config = OtpConfig(length=length, ttl_seconds=ttl_seconds)
        self._session.add(config)
        await self._session.flush()
        logger.info("Seeded default OTP config: length=%s ttl=%ss", length, ttl_seconds)
        return config
