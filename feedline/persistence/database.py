"""Async engine and session factory for the activity store.

Production runs on PostgreSQL through asyncpg. Tests build their own SQLite
engine and reuse ``create_session_factory``.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from feedline.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the pooled engine described by ``settings.database``."""
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Rows are mapped to frozen models right away, so nothing needs refreshing
    # after commit. Repositories flush explicitly when they need generated ids.
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
