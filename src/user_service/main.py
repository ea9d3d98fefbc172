"""
Application factory and uvicorn entry point.

Usage:
    user-service        # installed console script, see run()
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from user_service.api.v1.error_handlers import register_exception_handlers
from user_service.api.v1.users import router as users_router
from user_service.config.settings import Settings, get_settings
from user_service.core.cors import CORSPolicyMiddleware
from user_service.core.logging import RequestIDMiddleware, setup_logging
from user_service.database.base import Base
from user_service.database.session import build_engine, build_sessionmaker
from user_service.models import User  # noqa: F401 - registers the table on Base.metadata

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle: optional table creation, engine disposal."""
    settings: Settings = app.state.settings
    engine: AsyncEngine = app.state.engine

    if settings.CREATE_TABLES_ON_STARTUP:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("db.tables.created")

    logger.info("user-service started", extra={"env": settings.ENV})
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("user-service shut down")


def create_app(settings: Settings | None = None, engine: AsyncEngine | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Defaults to get_settings().
        engine: An existing AsyncEngine (tests pass an in-memory SQLite one).
                When omitted, one is built from settings.DATABASE_URL.
    """
    settings = settings or get_settings()
    engine = engine or build_engine(settings)

    app = FastAPI(title="User Service", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)

    app.include_router(users_router)
    register_exception_handlers(app)

    # add_middleware() wraps: the last one added runs outermost.
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(CORSPolicyMiddleware)

    return app


def run() -> None:
    settings = get_settings()
    setup_logging(settings)
    uvicorn.run(
        create_app(settings),
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        log_config=None,    # keep the dictConfig installed by setup_logging
    )


if __name__ == "__main__":
    run()
