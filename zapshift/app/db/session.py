"""
Database session configuration.

The engine and session factory live on a `Database` handle that the
application builds at startup and disposes at shutdown. Request handlers
receive sessions through the `get_db` dependency.
"""

from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from zapshift.app.core.config import Settings

# Create declarative base for models
Base = declarative_base()


class Database:
    """Owns the async engine and the session factory bound to it."""

    def __init__(self, url: str, engine: Optional[AsyncEngine] = None, **engine_kwargs):
        self.url = url
        self.engine = engine or create_async_engine(url, future=True, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        kwargs = {"echo": settings.db_echo}
        if not settings.database_url.startswith("sqlite"):
            kwargs["pool_size"] = settings.db_pool_size
            kwargs["max_overflow"] = settings.db_max_overflow
        return cls(settings.database_url, **kwargs)

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    FastAPI dependency for database sessions.

    Yields an async database session from the application's `Database`
    handle and ensures it's properly closed.
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
