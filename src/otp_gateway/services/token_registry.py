"""Token registry — in-memory bearer tokens with a fixed lifetime."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from otp_gateway.clock import Clock
from otp_gateway.models.user import User, UserRole

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL = timedelta(minutes=30)


@dataclass(frozen=True)
class AuthenticatedUser:
    """Snapshot of a user taken when the token was issued."""

    id: int
    username: str
    role: UserRole

    @classmethod
    def from_user(cls, user: User) -> AuthenticatedUser:
        return cls(id=user.id, username=user.username, role=user.role)


@dataclass(frozen=True)
class TokenInfo:
    token: str
    user: AuthenticatedUser
    expiry: datetime


class TokenRegistry:
    """Process-local map of opaque token → (user, expiry).

    Entries are lost on restart, so clients must sign in again. Expired
    entries are dropped lazily when they are looked up.
    """

    def __init__(self, clock: Clock, ttl: timedelta = DEFAULT_TOKEN_TTL) -> None:
        self._clock = clock
        self._ttl = ttl
        self._tokens: dict[str, TokenInfo] = {}
        self._lock = threading.Lock()

    def issue(self, user: AuthenticatedUser) -> str:
        """Create a new random token for *user* and return it."""
        token = str(uuid.uuid4())
        expiry = self._clock.now() + self._ttl
        with self._lock:
            self._tokens[token] = TokenInfo(token=token, user=user, expiry=expiry)
        logger.info("Issued token for user %s (expires at %s)", user.username, expiry)
        return token

    def lookup(self, token: str) -> AuthenticatedUser | None:
        """Return the token's user, or ``None`` if unknown or expired."""
        with self._lock:
            info = self._tokens.get(token)
            if info is None:
                return None
            if self._clock.now() > info.expiry:
                del self._tokens[token]
                logger.info("Token for user %s expired at %s", info.user.username, info.expiry)
                return None
            return info.user

    def revoke(self, token: str) -> bool:
        with self._lock:
            info = self._tokens.pop(token, None)
        if info is not None:
            logger.info("Token revoked for user %s", info.user.username)
        return info is not None

    def revoke_user(self, user_id: int) -> int:
        """Drop every token issued to *user_id*; return how many were removed."""
        with self._lock:
            stale = [t for t, info in self._tokens.items() if info.user.id == user_id]
            for token in stale:
                del self._tokens[token]
        return len(stale)

    def purge_expired(self) -> int:
        now = self._clock.now()
        with self._lock:
            stale = [t for t, info in self._tokens.items() if now > info.expiry]
            for token in stale:
                del self._tokens[token]
        return len(stale)

    @property
    def active_count(self) -> int:
        """Number of tokens currently held (expired ones included until read)."""
        return len(self._tokens)
