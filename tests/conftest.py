"""Test fixtures: a fresh in-memory database per test.

Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own engine on an in-memory SQLite database
   (aiosqlite). StaticPool keeps the single connection alive, so the
   schema created up front is what every session sees.
2. Service tests compose repositories and services directly over the
   session; API tests go through an httpx client with get_db overridden.
3. Auth is NOT mocked: API tests register real users and send real
   Bearer tokens, since ownership is the thing under test.

Env vars are set before anything from taskhub is imported so the
settings singleton picks them up.
"""

import os

os.environ.setdefault("TASKHUB_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TASKHUB_BCRYPT_ROUNDS", "4")
os.environ.setdefault("TASKHUB_JWT_SECRET", "test-secret-with-enough-bytes-for-hs256")

import uuid
from datetime import timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from taskhub.auth.jwt import TokenCodec
from taskhub.auth.password import PasswordHasher
from taskhub.db.engine import get_db
from taskhub.db.models import Base
from taskhub.db.repositories import ProjectRepository, TaskRepository, UserRepository
from taskhub.main import app
from taskhub.services.credential_service import CredentialService
from taskhub.services.ownership import OwnershipGate
from taskhub.services.progress import ProgressAggregator
from taskhub.services.project_service import ProjectService
from taskhub.services.task_service import TaskService

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TEST_SECRET = "test-secret-with-enough-bytes-for-hs256"


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session on a brand-new in-memory database."""
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)()
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


# ─── Core components ─────────────────────────────────────


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def codec():
    return TokenCodec(secret=TEST_SECRET, ttl=timedelta(hours=1))


@pytest.fixture
def users(db_session):
    return UserRepository(db_session)


@pytest.fixture
def projects(db_session):
    return ProjectRepository(db_session)


@pytest.fixture
def tasks(db_session):
    return TaskRepository(db_session)


@pytest.fixture
def gate(projects, tasks):
    return OwnershipGate(projects, tasks)


@pytest.fixture
def credentials(users, hasher, codec):
    return CredentialService(users, hasher, codec)


@pytest.fixture
def project_svc(projects, gate):
    return ProjectService(projects, gate)


@pytest.fixture
def task_svc(tasks, gate):
    return TaskService(tasks, gate, ProgressAggregator(gate, tasks))


@pytest_asyncio.fixture()
async def alice(credentials):
    """A registered user; returns the Session."""
    result = await credentials.register(
        "alice@example.com", "Alice Doe", "alice_password", "alice_password"
    )
    return result.value


@pytest_asyncio.fixture()
async def bob(credentials):
    result = await credentials.register(
        "bob@example.com", "Bob Roe", "bob_password", "bob_password"
    )
    return result.value


# ─── HTTP ────────────────────────────────────────────────


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client with the app's get_db overridden; auth runs for real."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def register_user(client):
    """Register a fresh user over HTTP; returns (auth headers, session body)."""

    async def _register(email=None, password="password_123"):
        email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
        r = await client.post(
            "/api/v1/auth/register",
            json={
                "email": email,
                "fullName": "Test User",
                "password": password,
                "confirmPassword": password,
            },
        )
        assert r.status_code == 201, r.text
        body = r.json()
        return {"Authorization": f"Bearer {body['token']}"}, body

    return _register
