"""Seed script — creates the schema, the OTP config row and sample users."""

import asyncio

from otp_gateway.clock import SystemClock
from otp_gateway.config import settings
from otp_gateway.database.engine import async_session_factory, engine, init_db
from otp_gateway.exceptions import ConflictError
from otp_gateway.models.user import UserRole
from otp_gateway.security.password import PasswordHasher
from otp_gateway.services.token_registry import TokenRegistry
from otp_gateway.services.user_service import UserService

SAMPLE_USERS = [
    ("admin", "admin-password", UserRole.ADMIN),
    ("./otp_codes/alice.txt", "alice-password", UserRole.USER),
    ("bob@example.com", "bob-password", UserRole.USER),
]


async def seed() -> None:
    """Insert sample users, skipping any that already exist."""
    await init_db(
        engine,
        async_session_factory,
        settings.default_otp_length,
        settings.default_otp_ttl_seconds,
    )
    users = UserService(
        async_session_factory,
        TokenRegistry(SystemClock()),
        PasswordHasher(rounds=settings.bcrypt_rounds),
    )
    created = 0
    for username, password, role in SAMPLE_USERS:
        try:
            await users.sign_up(username, password, role)
            created += 1
        except ConflictError:
            print(f"• {username} already present, skipped")
    await engine.dispose()
    print(f"✅ Seeded {created} users into the database.")


if __name__ == "__main__":
    asyncio.run(seed())
