"""Password hashing (bcrypt with SHA-256 pre-hash).

Bcrypt truncates inputs at 72 bytes; pre-hashing with SHA-256 yields a
fixed-length input so long passwords are not silently truncated.
"""

import base64
import hashlib

import bcrypt


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


class PasswordHasher:
    """One-way password hashing with a constant-time comparison."""

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """Return the bcrypt hash of *password* as text."""
        hashed = bcrypt.hashpw(_prehash(password), bcrypt.gensalt(rounds=self._rounds))
        return hashed.decode("utf-8")

    def verify(self, password: str, stored_hash: str) -> bool:
        """Return ``True`` if *password* matches *stored_hash*."""
        if not password or not stored_hash:
            return False
        try:
            return bool(bcrypt.checkpw(_prehash(password), stored_hash.encode("utf-8")))
        except (ValueError, TypeError):
            return False
