"""
Engine and session factory construction plus the per-request session dependency.

Nothing here is created at import time: `create_app()` builds the engine from
settings (or receives one from tests) and keeps the session factory on
`app.state`. Request handlers get their session through `get_async_session`,
so every operation acquires a connection for its own duration only.
"""

import logging
from typing import Any, AsyncGenerator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from user_service.config.settings import Settings

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the AsyncEngine (and its connection pool) from settings.

    Pool sizing and the acquisition timeout only apply to server databases;
    SQLite engines use SQLAlchemy's default pool for the driver.
    """
    url = make_url(settings.DATABASE_URL)

    engine_kwargs: dict[str, Any] = {
        "echo": settings.SQLALCHEMY_ECHO,
        "pool_pre_ping": True,    # drop dead connections before handing them out
        # exception text must not carry bound parameters (passwords)
        "hide_parameters": True,
    }
    if url.get_backend_name() != "sqlite":
        engine_kwargs.update(
            pool_size=settings.SQLALCHEMY_POOL_SIZE,
            max_overflow=settings.SQLALCHEMY_MAX_OVERFLOW,
            pool_timeout=settings.SQLALCHEMY_POOL_TIMEOUT,
        )

    logger.info(
        "db.engine.created",
        extra={"backend": url.get_backend_name(), "driver": url.get_driver_name()},
    )
    return create_async_engine(url, **engine_kwargs)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False keeps returned ORM objects readable after commit,
    # which the routes rely on when serializing the created user.
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency. Yields a session and ensures it's closed after the request.

    The `async with` block returns the connection to the pool on every exit path,
    including task cancellation.

    Usage:
        async def endpoint(db: AsyncSession = Depends(get_async_session)):
            await db.execute(...)
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.sessionmaker
    async with session_factory() as session:
        yield session
