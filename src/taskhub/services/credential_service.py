"""Credential service — registration, login, current user.

Login never tells the caller *why* it failed: an unknown email and a
wrong password both return the same UNAUTHORIZED failure, and both
spend one bcrypt verification, so neither the response nor its timing
reveals which accounts exist.

Registration checks email uniqueness up front, but two concurrent
registrations can both pass that check. The users.email unique
constraint settles the race, and its violation is reported as the same
CONFLICT as the pre-check.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog

from taskhub.auth.jwt import TokenCodec
from taskhub.auth.password import PasswordHasher
from taskhub.db.models import User
from taskhub.db.repositories import DuplicateEmailError, UserRepository
from taskhub.outcome import (
    Ok,
    Outcome,
    conflict,
    not_found,
    unauthorized,
    validation_error,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class UserSummary:
    """Public view of a user. Never carries the password hash."""

    id: uuid.UUID
    email: str
    full_name: str
    created_at: datetime

    @classmethod
    def of(cls, user: User) -> "UserSummary":
        return cls(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            created_at=user.created_at,
        )


@dataclass(frozen=True)
class Session:
    token: str
    expires_at: datetime
    expires_in_seconds: int
    user: UserSummary


class CredentialService:
    """Registers and authenticates users."""

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenCodec,
    ):
        self.users = users
        self.hasher = hasher
        self.tokens = tokens

    async def login(
        self, email: str, password: str, now: Optional[datetime] = None
    ) -> Outcome[Session]:
        user = await self.users.find_by_email(email)
        if user is None:
            self.hasher.verify_dummy(password)
            logger.info("auth.login_failed")
            return unauthorized()

        if not self.hasher.verify(password, user.password_hash):
            logger.info("auth.login_failed")
            return unauthorized()

        # Re-hash on login when the configured cost has been raised
        if self.hasher.needs_rehash(user.password_hash):
            user.password_hash = self.hasher.hash(password)
            await self.users.save(user)
            logger.info("auth.password_rehashed", user_id=str(user.id))

        logger.info("auth.login_succeeded", user_id=str(user.id))
        return Ok(self._open_session(user, now))

    async def register(
        self,
        email: str,
        full_name: str,
        password: str,
        confirm_password: str,
        now: Optional[datetime] = None,
    ) -> Outcome[Session]:
        if password != confirm_password:
            return validation_error("Passwords do not match")

        if await self.users.find_by_email(email) is not None:
            return conflict("Email already registered")

        user = User(
            email=email,
            full_name=full_name,
            password_hash=self.hasher.hash(password),
        )
        try:
            user = await self.users.add(user)
        except DuplicateEmailError:
            # Lost the race against a concurrent registration
            return conflict("Email already registered")

        logger.info("auth.registered", user_id=str(user.id))
        return Ok(self._open_session(user, now))

    async def current_user(self, user_id: uuid.UUID) -> Outcome[UserSummary]:
        user = await self.users.find_by_id(user_id)
        if user is None:
            return not_found("User")
        return Ok(UserSummary.of(user))

    def _open_session(self, user: User, now: Optional[datetime]) -> Session:
        issued = self.tokens.issue(user.id, now)
        return Session(
            token=issued.token,
            expires_at=issued.expires_at,
            expires_in_seconds=issued.expires_in_seconds,
            user=UserSummary.of(user),
        )
