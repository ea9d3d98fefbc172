"""
Core pytest configuration for the entire test suite.

This module provides only the essentials shared by ALL tests:

- logging installed once per session, the way the service installs it
- a fresh in-memory SQLite engine per test (tables created, then disposed)
- a session bound to that engine, and an app + HTTP client wired to it

Domain-specific fixtures (repositories, services, sample users) live in
tests/test_fixtures/repository_fixtures.py and are imported at the bottom.
"""

from __future__ import annotations

# -------------------------------
# Standard library imports
# -------------------------------
import logging
from typing import AsyncGenerator

# -------------------------------
# Early logging tuning (IMPORTANT)
# -------------------------------
# Set the level for noisy third-party loggers at import time, before importing
# modules that may initialize them. Keep this block above the project imports.
NOISY_LOGGERS = (
    "faker",
    "faker.factory",
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "aiosqlite",
    "asyncio",
    "httpx",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# -------------------------------
# Third-party / project imports
# -------------------------------
import httpx
import pytest
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from user_service.config.settings import Settings
from user_service.core.logging.builder import setup_logging
from user_service.database.base import Base
from user_service.main import create_app
from user_service.models import User  # noqa: F401 - import to register the table with Base.metadata

# A single shared connection: every session in a test sees the same in-memory database.
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings for the test session, built explicitly so a developer's .env never
    leaks into test runs (no files written, no Postgres needed).
    """
    return Settings(
        ENV="testing",
        TESTING=True,
        DATABASE_URL_OVERRIDE=TEST_DATABASE_URL,
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="text",
        LOG_TO_STDOUT=True,
        ENABLE_SQL_LOGGING=False,
        CREATE_TABLES_ON_STARTUP=False,
    )


# The `autouse=True` part means pytest applies this fixture without it being
# requested by the test functions.
@pytest.fixture(scope="session", autouse=True)
def configure_logging(test_settings: Settings):
    """
    Install application logging for the entire test session.

    Calls the same `setup_logging(settings)` the service runs at startup, so
    formatters and filters (request_id, redact) are active in tests too.
    pytest's caplog handler is attached per test phase, so `caplog` keeps
    working after dictConfig has replaced the root handlers.
    """
    setup_logging(test_settings)

    # dictConfig re-applies levels; silence the noisy libraries again.
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    yield


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------


@pytest.fixture()
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    A brand-new in-memory database per test.

    StaticPool keeps one connection alive for the engine's lifetime; without it
    every checkout would open an empty database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture()
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    An AsyncSession on the per-test engine, configured like the app's
    (expire_on_commit=False). Code under test may commit freely: the database
    is thrown away with the engine.
    """
    maker = async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session


# ------------------------------------------------------------------------------------------------
# APP / HTTP FIXTURES
# ------------------------------------------------------------------------------------------------


@pytest.fixture()
def app(test_settings: Settings, async_engine: AsyncEngine) -> FastAPI:
    """The real application, bound to the per-test engine."""
    return create_app(test_settings, engine=async_engine)


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Async HTTP client that calls the app in-process.

    ASGITransport does not run the lifespan, which is fine here: the tables
    were created by `async_engine` and the engine is disposed there too.
    """
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# Repository / service fixtures
from .test_fixtures.repository_fixtures import (  # noqa: E402
    base_repo,
    user_repository,
    user_service,
    sample_user_data,
    signup_payload,
    create_user,
    created_user,
    multiple_users,
)
