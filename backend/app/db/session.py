"""
Database session configuration.

This module handles database engine creation and session management
using SQLAlchemy with async support for PostgreSQL. The engine is built
from the settings handed to ``create_app`` and kept on ``app.state``.
"""

from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from backend.app.core.config import Settings


def build_engine(config: Settings) -> AsyncEngine:
    """Create the async engine described by the given settings."""
    options = {"echo": config.db_echo, "future": True}
    if not config.database_url.startswith("sqlite"):
        options["pool_size"] = config.db_pool_size
        options["max_overflow"] = config.db_max_overflow
    return create_async_engine(config.database_url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create the async session factory bound to ``engine``."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


# Create declarative base for models
Base = declarative_base()


async def get_db(request: Request):
    """
    FastAPI dependency for database sessions.

    Yields an async database session and ensures it's properly closed.
    """
    async with request.app.state.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
