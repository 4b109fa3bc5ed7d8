"""Pytest configuration for all tests."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import rolestore.infrastructure.persistence.models  # noqa: F401
from rolestore.core.config import Settings
from rolestore.core.context import clear_current_session
from rolestore.domain.services.role_cache import get_role_cache
from rolestore.infrastructure.persistence.database import Base


@pytest.fixture(autouse=True)
def _reset_process_state():
    """Start every test with a fresh role cache and no user session."""
    get_role_cache.cache_clear()
    clear_current_session()
    yield
    get_role_cache.cache_clear()
    clear_current_session()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, environment="testing")


@pytest.fixture
def service_settings() -> Settings:
    """Settings with per-service role versioning enabled."""
    return Settings(
        _env_file=None,
        environment="testing",
        supports_roles_download_by_service=True,
    )


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create an in-memory SQLite database and a session factory bound to it."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()
