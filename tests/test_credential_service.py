"""CredentialService: login, registration, anti-enumeration, races."""

import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select

from taskhub.auth.password import PasswordHasher
from taskhub.db.models import User
from taskhub.db.repositories import UserRepository
from taskhub.outcome import Failure, FailureKind, Ok
from taskhub.services.credential_service import CredentialService


async def _user_count(db_session, email):
    return await db_session.scalar(
        select(func.count()).select_from(User).where(User.email == email)
    )


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


async def test_register_returns_session(credentials, codec):
    result = await credentials.register(
        "new@example.com", "New User", "password_123", "password_123"
    )
    assert isinstance(result, Ok)
    session = result.value
    assert session.user.email == "new@example.com"
    assert session.user.full_name == "New User"
    assert session.expires_in_seconds == 3600
    assert codec.verify(session.token).value == session.user.id


async def test_session_user_summary_has_no_password_hash(alice):
    assert not hasattr(alice.user, "password_hash")


async def test_register_mismatched_passwords(credentials, db_session):
    result = await credentials.register(
        "mismatch@example.com", "User", "password_123", "password_124"
    )
    assert isinstance(result, Failure)
    assert result.kind == FailureKind.VALIDATION
    assert await _user_count(db_session, "mismatch@example.com") == 0


async def test_register_duplicate_email(credentials, db_session):
    first = await credentials.register("dup@example.com", "One", "password_1", "password_1")
    assert isinstance(first, Ok)

    second = await credentials.register("dup@example.com", "Two", "password_2", "password_2")
    assert isinstance(second, Failure)
    assert second.kind == FailureKind.CONFLICT
    assert await _user_count(db_session, "dup@example.com") == 1


async def test_register_duplicate_email_ignores_case(credentials, db_session):
    await credentials.register("Case@Example.com", "One", "password_1", "password_1")
    second = await credentials.register("case@EXAMPLE.com", "Two", "password_2", "password_2")
    assert second.kind == FailureKind.CONFLICT
    assert await _user_count(db_session, "case@example.com") == 1


class _BlindUserRepository(UserRepository):
    """Pretends no user exists, as if a concurrent insert hadn't landed yet."""

    async def find_by_email(self, email):
        return None


async def test_register_race_lost_at_constraint_is_conflict(
    credentials, db_session, hasher, codec
):
    await credentials.register("race@example.com", "First", "password_1", "password_1")

    racing = CredentialService(_BlindUserRepository(db_session), hasher, codec)
    result = await racing.register("race@example.com", "Second", "password_2", "password_2")

    assert isinstance(result, Failure)
    assert result.kind == FailureKind.CONFLICT
    assert await _user_count(db_session, "race@example.com") == 1


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


async def test_login_success(credentials, alice, codec):
    result = await credentials.login("alice@example.com", "alice_password")
    assert isinstance(result, Ok)
    assert result.value.user.id == alice.user.id
    assert codec.verify(result.value.token).value == alice.user.id


async def test_login_email_is_case_insensitive(credentials, alice):
    result = await credentials.login("  ALICE@Example.COM ", "alice_password")
    assert isinstance(result, Ok)


async def test_wrong_password_and_unknown_email_are_indistinguishable(credentials, alice):
    wrong_password = await credentials.login("alice@example.com", "not_her_password")
    unknown_email = await credentials.login("nobody@example.com", "alice_password")
    assert isinstance(wrong_password, Failure)
    assert wrong_password == unknown_email
    assert wrong_password.kind == FailureKind.UNAUTHORIZED


async def test_login_token_uses_injected_clock(credentials, alice):
    now = datetime(2026, 5, 1, 8, 30, tzinfo=timezone.utc)
    result = await credentials.login("alice@example.com", "alice_password", now=now)
    assert result.value.expires_at == now + timedelta(hours=1)


async def test_login_rehashes_weak_digest(db_session, users, codec):
    weak = PasswordHasher(rounds=4)
    await CredentialService(users, weak, codec).register(
        "upgrade@example.com", "Up Grade", "password_123", "password_123"
    )

    strong = PasswordHasher(rounds=5)
    result = await CredentialService(users, strong, codec).login(
        "upgrade@example.com", "password_123"
    )
    assert isinstance(result, Ok)

    user = await users.find_by_email("upgrade@example.com")
    assert not strong.needs_rehash(user.password_hash)
    assert strong.verify("password_123", user.password_hash)


# ═══════════════════════════════════════════════════════════
# Current user
# ═══════════════════════════════════════════════════════════


async def test_current_user(credentials, alice):
    result = await credentials.current_user(alice.user.id)
    assert result.value == alice.user


async def test_current_user_missing(credentials):
    result = await credentials.current_user(uuid.uuid4())
    assert result.kind == FailureKind.NOT_FOUND
