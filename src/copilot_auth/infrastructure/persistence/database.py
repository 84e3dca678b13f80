"""Async engine and session handling for the token and credential store.

SQLite (aiosqlite) is the default backend; PostgreSQL (asyncpg) is supported
through the ``postgres`` extra. One :class:`DatabaseManager` is created per
application and kept on ``app.state``.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from copilot_auth.core.config import Settings
from copilot_auth.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by every model."""


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DatabaseManager:
    """Owns the async engine and session factory.

    Both are created lazily on first use and released by :meth:`disconnect`.
    Pool sizing applies to server databases only; SQLite uses the driver's
    default pool, or a single shared connection for ``:memory:``.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize the database manager.

        Args:
            settings: Application settings with the database URL and pool options.
        """
        self.settings = settings
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.settings.database_url.startswith("sqlite")

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            kwargs: dict[str, Any] = {"echo": self.settings.db_echo}
            if self.is_sqlite:
                kwargs["connect_args"] = {"check_same_thread": False}
                if ":memory:" in self.settings.database_url:
                    # One shared connection, otherwise each session sees an empty database
                    kwargs["poolclass"] = StaticPool
            else:
                kwargs.update(
                    pool_size=self.settings.db_pool_size,
                    max_overflow=self.settings.db_max_overflow,
                    pool_timeout=self.settings.db_pool_timeout,
                    pool_recycle=self.settings.db_pool_recycle,
                )
            self._engine = create_async_engine(self.settings.database_url, **kwargs)
            logger.info(
                "Database engine created",
                database_url=self._engine.url.render_as_string(hide_password=True),
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Session factory; sessions keep loaded state after commit."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    async def create_tables(self) -> None:
        """Create all database tables.

        Called on startup in development and by the ``init-db`` command.
        """
        # Register all models with Base.metadata
        from copilot_auth.infrastructure.persistence import models  # noqa: F401

        if self.is_sqlite:
            db_path = self.settings.database_url.split(":///")[-1]
            if db_path and db_path != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created")

    async def disconnect(self) -> None:
        """Dispose of the engine; the next use creates a fresh one."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session, rolling back if the caller raises."""
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def check_connection(self) -> bool:
        """Run ``SELECT 1``; used by the readiness check.

        Returns:
            True if the database answered, False otherwise.
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error("Database connection check failed", error=str(e))
            return False


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request.

    Auth routes get their repositories and :class:`AuthService` built on this
    session, so a request's writes share a single transaction scope.
    """
    db: DatabaseManager = request.app.state.db_manager
    async with db.session() as session:
        yield session
