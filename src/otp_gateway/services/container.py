"""Explicit wiring of the long-lived service objects held on ``app.state``."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from otp_gateway.clock import Clock
from otp_gateway.config import Settings
from otp_gateway.notifications.factory import NotifierFactory
from otp_gateway.security.password import PasswordHasher
from otp_gateway.services.admin_service import AdminService
from otp_gateway.services.expiration_scheduler import OtpExpirationScheduler
from otp_gateway.services.otp_service import OtpService
from otp_gateway.services.token_registry import TokenRegistry
from otp_gateway.services.user_service import UserService


@dataclass
class AppServices:
    settings: Settings
    clock: Clock
    token_registry: TokenRegistry
    otp_service: OtpService
    user_service: UserService
    admin_service: AdminService
    scheduler: OtpExpirationScheduler


def build_services(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    clock: Clock,
    notifier_factory: NotifierFactory | None = None,
) -> AppServices:
    notifiers = notifier_factory or NotifierFactory.from_settings(settings, clock)
    tokens = TokenRegistry(clock, ttl=timedelta(minutes=settings.token_ttl_minutes))
    otp_service = OtpService(session_factory, notifiers, clock)
    return AppServices(
        settings=settings,
        clock=clock,
        token_registry=tokens,
        otp_service=otp_service,
        user_service=UserService(
            session_factory, tokens, PasswordHasher(rounds=settings.bcrypt_rounds)
        ),
        admin_service=AdminService(session_factory, tokens),
        scheduler=OtpExpirationScheduler(
            otp_service, settings.expiration_interval_minutes, token_registry=tokens
        ),
    )
