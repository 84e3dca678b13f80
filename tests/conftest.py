"""Pytest configuration for all tests."""

from collections.abc import Awaitable, Callable
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from copilot_auth.core.config import Settings
from copilot_auth.domain.entities import User, UserStatus
from copilot_auth.infrastructure.auth import CredentialHasher
from copilot_auth.infrastructure.persistence import models  # noqa: F401
from copilot_auth.infrastructure.persistence.database import Base
from copilot_auth.infrastructure.persistence.repositories import UserRepository
from copilot_auth.infrastructure.services import TokenService

TEST_PASSWORD = "Correct-Horse-42!"


class CapturingEmailSender:
    """Email sender that records raw tokens instead of delivering mail."""

    def __init__(self) -> None:
        self.verification: list[tuple[str, str]] = []
        self.password_reset: list[tuple[str, str]] = []
        self.password_changed: list[str] = []

    async def send_verification_email(self, email: str, raw_token: str) -> None:
        self.verification.append((email, raw_token))

    async def send_password_reset_email(self, email: str, raw_token: str) -> None:
        self.password_reset.append((email, raw_token))

    async def send_password_changed_email(self, email: str) -> None:
        self.password_changed.append(email)


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: cheap hashing, no network, in-memory database."""
    return Settings(
        _env_file=None,
        environment="testing",
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret="test-access-secret-0123456789abcdefghij",
        jwt_refresh_secret="test-refresh-secret-0123456789abcdefghij",
        password_hash_time_cost=1,
        password_hash_memory_cost=8192,
        password_hash_parallelism=1,
        token_hash_time_cost=1,
        token_hash_memory_cost=1024,
        breach_check_enabled=False,
        email_provider="console",
        log_level="WARNING",
        log_format="console",
    )


@pytest.fixture
def password_hasher(settings: Settings) -> CredentialHasher:
    return CredentialHasher.for_passwords(settings)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def email_sender() -> CapturingEmailSender:
    return CapturingEmailSender()


@pytest.fixture
def app(settings: Settings, email_sender: CapturingEmailSender, db_session: AsyncSession) -> FastAPI:
    """Application wired to the test database and the capturing email sender."""
    from copilot_auth.infrastructure.api.app import create_app
    from copilot_auth.infrastructure.persistence.database import get_db_session

    application = create_app(settings)
    application.state.email_sender = email_sender
    application.dependency_overrides[get_db_session] = lambda: db_session
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client for the application."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


@pytest.fixture
def create_user(
    db_session: AsyncSession,
    password_hasher: CredentialHasher,
) -> Callable[..., Awaitable[User]]:
    """Factory that stores a user directly, bypassing registration."""

    async def _create(
        email: str = "alice@example.com",
        password: str = TEST_PASSWORD,
        status: UserStatus = UserStatus.ACTIVE,
        email_verified: bool = True,
    ) -> User:
        user = User(
            id=TokenService.generate_jti(),
            email=email,
            password_hash=password_hasher.hash(password),
            name="Test User",
            status=status,
            email_verified=email_verified,
        )
        user = await UserRepository(db_session).create(user)
        await db_session.commit()
        return user

    return _create
