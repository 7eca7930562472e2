"""Password hashing utilities.

Uses bcrypt for password hashing. bcrypt embeds a random salt in every
digest ("$2b$<cost>$<salt+hash>") so nothing else needs to be stored,
and its cost factor makes offline brute force expensive. checkpw
compares digests in constant time.
"""

import secrets
from functools import lru_cache
from typing import Optional

import bcrypt

from taskhub.config import settings

BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Salted, cost-parameterized one-way hashing."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._dummy_digest: Optional[str] = None

    def hash(self, password: str) -> str:
        """Hash a password with bcrypt.

        Passwords are truncated to 72 bytes (bcrypt's limit).
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against its digest. Never raises."""
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            return False

    def verify_dummy(self, password: str) -> bool:
        """Spend the same CPU time as a real verify, always returning False.

        Used when no account matches so that "no such user" and
        "wrong password" take equally long.
        """
        if self._dummy_digest is None:
            self._dummy_digest = self.hash(secrets.token_urlsafe(16))
        self.verify(password, self._dummy_digest)
        return False

    def needs_rehash(self, password_hash: str) -> bool:
        """True when the digest was produced with a lower cost than configured.

        A digest whose cost cannot be read is left alone; it never verified
        in the first place.
        """
        try:
            _, _, cost, _ = password_hash.split("$", 3)
            return int(cost) < self.rounds
        except (ValueError, AttributeError):
            return False


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """FastAPI dependency: one hasher per process, built from settings."""
    return PasswordHasher(rounds=settings.bcrypt_rounds)
