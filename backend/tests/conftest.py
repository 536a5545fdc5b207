"""
Memos Backend - Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every API test gets its own application built by `create_app()` with
       a throwaway SQLite file, a throwaway storage root and a fixed token
       secret. Nothing is shared between tests.

Fixture Hierarchy:
    Function-scoped:
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── temp_storage:    empty directory for object store tests
    ├── test_settings:   Settings pointing at tmp_path
    ├── test_app:        FastAPI app with the schema created
    ├── test_client:     HTTPX AsyncClient bound to test_app
    ├── host_session:    signed-up HOST account (token + headers)
    └── make_user:       factory inserting extra USER accounts
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# `memos.main` builds a module-level app from the environment on import;
# point it somewhere harmless before any test imports it
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STORAGE_ROOT", tempfile.mkdtemp(prefix="memos_test_"))
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from memos.config import Settings  # noqa: E402
from memos.models.enums import Role  # noqa: E402
from memos.models.user import User  # noqa: E402
from memos.security.passwords import hash_password  # noqa: E402

TEST_SECRET = "test-secret-not-for-production"

HOST_USERNAME = "admin"
HOST_PASSWORD = "admin-password"


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


# ══════════════════════════════════════════════════════════════════════════
# Unit Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_upload(mock_db_session):
            mock_db_session.flush.side_effect = SQLAlchemyError("boom")
            ...
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings isolated to tmp_path; small upload limit for 413 tests."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'memos.db'}",
        storage_backend="local",
        storage_root=str(tmp_path / "objects"),
        jwt_secret=TEST_SECRET,
        log_level="WARNING",
        rate_limit_requests=100000,
        max_upload_size=4096,
    )


@pytest_asyncio.fixture
async def test_app(test_settings):
    """
    A fully wired application with its schema created.

    The lifespan is not run by ASGITransport, so the schema is created here.
    """
    from memos.database import create_schema, dispose_engine
    from memos.main import create_app

    app = create_app(test_settings)
    await create_schema(app.state.engine)
    yield app
    await dispose_engine(app.state.engine)


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def host_session(test_client) -> dict:
    """Signs up the first account (the HOST) and returns its token and record."""
    response = await test_client.post(
        "/api/auth/signup",
        json={"username": HOST_USERNAME, "password": HOST_PASSWORD},
    )
    assert response.status_code == 200, response.text
    body = response.json()
    return {
        "token": body["accessToken"],
        "user": body["user"],
        "headers": bearer(body["accessToken"]),
    }


@pytest.fixture
def make_user(test_app):
    """
    Factory for additional accounts. Signup only ever creates the HOST, so
    extra users are inserted directly and given a token by the app's
    authenticator.
    """

    async def _make_user(username: str, password: str = "password", role: Role = Role.USER) -> dict:
        async with test_app.state.session_factory() as session:
            user = User(
                uid=str(uuid4()),
                username=username,
                nickname=username,
                role=role.value,
                password_hash=hash_password(password),
            )
            session.add(user)
            await session.commit()

        token = test_app.state.authenticator.issue(user.uid, user.username, user.role)
        return {"id": user.id, "uid": user.uid, "token": token, "headers": bearer(token)}

    return _make_user
