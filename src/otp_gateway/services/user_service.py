"""User service — sign-up with the single-admin guard, sign-in, sign-out."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from otp_gateway.database.repository import UserRepository
from otp_gateway.exceptions import (
    AlreadyExistsError,
    BadRequestError,
    ConflictError,
    UnauthorizedError,
)
from otp_gateway.models.user import User, UserRole
from otp_gateway.security.password import PasswordHasher
from otp_gateway.services.token_registry import AuthenticatedUser, TokenRegistry

logger = logging.getLogger(__name__)


class UserService:
    """Registers accounts and exchanges credentials for bearer tokens."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        token_registry: TokenRegistry,
        password_hasher: PasswordHasher,
    ) -> None:
        self._session_factory = session_factory
        self._tokens = token_registry
        self._hasher = password_hasher

    async def admin_exists(self) -> bool:
        async with self._session_factory() as session:
            return await UserRepository(session).admin_exists()

    async def sign_up(self, username: str, password: str, role: UserRole) -> User:
        """Create a new account.

        Raises ``AlreadyExistsError`` for a taken username and
        ``ConflictError`` when a second administrator is requested.
        """
        if not username or not username.strip():
            raise BadRequestError("Username must not be empty")
        if not password:
            raise BadRequestError("Password must not be empty")

        password_hash = self._hasher.hash(password)
        try:
            async with self._session_factory() as session, session.begin():
                users = UserRepository(session)
                if await users.get_by_username(username) is not None:
                    logger.warning("sign_up: username %s already taken", username)
                    raise AlreadyExistsError("Username already exists")
                if role == UserRole.ADMIN and await users.admin_exists():
                    logger.warning("sign_up: refused second admin %s", username)
                    raise ConflictError("Admin already exists")
                user = await users.add(
                    User(username=username, password_hash=password_hash, role=role)
                )
        except IntegrityError as exc:
            # Lost a race against a concurrent sign-up; the unique indexes decided.
            logger.warning("sign_up: integrity error for %s: %s", username, exc.orig)
            if role == UserRole.ADMIN:
                raise ConflictError("Admin already exists") from exc
            raise AlreadyExistsError("Username already exists") from exc

        logger.info("User %s registered with role %s", username, role.value)
        return user

    async def login(self, username: str, password: str) -> str:
        """Verify credentials and return a freshly issued token."""
        async with self._session_factory() as session:
            user = await UserRepository(session).get_by_username(username)

        if user is None or not self._hasher.verify(password, user.password_hash):
            logger.warning("login: invalid credentials for %s", username)
            raise UnauthorizedError("Invalid username or password")

        token = self._tokens.issue(AuthenticatedUser.from_user(user))
        logger.info("User %s signed in", username)
        return token

    def logout(self, token: str) -> None:
        self._tokens.revoke(token)
