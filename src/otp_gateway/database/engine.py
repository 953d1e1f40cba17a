"""Database engine, async session factory and cold-start bootstrap."""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from otp_gateway.config import settings
from otp_gateway.database.repository import OtpConfigRepository
from otp_gateway.models.base import Base
from otp_gateway.models import otp, user  # noqa: F401  (register tables)

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(database_url, echo=echo)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


engine = build_engine(settings.database_url, echo=settings.debug)

async_session_factory = build_session_factory(engine)


async def init_db(
    db_engine: AsyncEngine,
    session_factory: async_sessionmaker[AsyncSession],
    default_length: int = 6,
    default_ttl_seconds: int = 300,
) -> None:
    """Create all tables that don't yet exist and seed the OTP config row."""
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables created / verified")

    async with session_factory() as session, session.begin():
        await OtpConfigRepository(session).init_default_if_empty(
            default_length, default_ttl_seconds
        )
