"""Session token issuance and verification.

JWT (JSON Web Token) provides stateless authentication: the token
carries the user id and its own expiry, signed with a server-held
secret. Nothing is stored server-side, so verification is pure
computation and there is no revocation. A token stays valid until
it expires.

Verification distinguishes an expired token from an invalid one so
the boundary can report them differently. The signature is always
checked before expiry, so a forged token never reports "expired".
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import jwt

from taskhub.config import settings
from taskhub.outcome import Ok, Outcome, token_expired, token_invalid

ACCESS_TOKEN_TYPE = "access"


@dataclass(frozen=True)
class IssuedToken:
    token: str
    issued_at: datetime
    expires_at: datetime

    @property
    def expires_in_seconds(self) -> int:
        return int((self.expires_at - self.issued_at).total_seconds())


class TokenCodec:
    """Signs and verifies access tokens for a single secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=1),
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(
        self, subject_user_id: uuid.UUID, now: Optional[datetime] = None
    ) -> IssuedToken:
        """Create a signed access token for the given user."""
        issued_at = _as_utc(now or _utcnow()).replace(microsecond=0)
        expires_at = issued_at + self.ttl
        payload = {
            "sub": str(subject_user_id),
            "type": ACCESS_TOKEN_TYPE,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self.secret, algorithm=self.algorithm)
        return IssuedToken(token=token, issued_at=issued_at, expires_at=expires_at)

    def verify(
        self, token: str, now: Optional[datetime] = None
    ) -> Outcome[uuid.UUID]:
        """Verify a token and return the subject user id.

        Fails with TOKEN_INVALID on a bad signature, malformed token or
        missing claims, and with TOKEN_EXPIRED once `now` is past `exp`.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                # Expiry is checked below against the caller's clock.
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["sub", "iat", "exp"],
                },
            )
        except jwt.InvalidTokenError:
            return token_invalid()

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            return token_invalid()

        try:
            expires_at = int(payload["exp"])
            subject = uuid.UUID(str(payload["sub"]))
        except (TypeError, ValueError):
            return token_invalid()

        if _as_utc(now or _utcnow()).timestamp() > expires_at:
            return token_expired()
        return Ok(subject)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    # A naive clock is read as UTC, never as local time.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


@lru_cache
def get_token_codec() -> TokenCodec:
    """FastAPI dependency: codec configured from settings."""
    return TokenCodec(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(minutes=settings.access_token_expire_minutes),
    )
