"""Mock persistence providers for testing."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from feedline.domain.repository import (
    ActivityRepository,
    ProfileRepository,
    UserRepository,
)
from feedline.persistence.database import create_session_factory
from feedline.persistence.repository import SqlActivityRepository
from feedline.persistence.repository.inmemory import (
    InMemoryProfileRepository,
    InMemoryUserRepository,
)
from feedline.persistence.tables import metadata
from feedline.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider backed by an in-memory SQLite database.

    Every container gets its own database, so each test starts empty. Users
    and profiles live in APP-scoped in-memory repositories so tests can seed
    them and read them back across requests.
    """

    __is_mock__ = True

    @provide(scope=Scope.APP)
    async def get_engine(self) -> AsyncIterator[AsyncEngine]:
        """Provide a fresh in-memory SQLite engine with the schema created."""
        engine = create_async_engine(
            "sqlite+aiosqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

        # Let SQLAlchemy emit BEGIN itself so SAVEPOINT behaves as on PostgreSQL
        @event.listens_for(engine.sync_engine, "connect")
        def _disable_driver_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")

        async with engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterator[AsyncSession]:
        """Provide a session committed when the request scope closes."""
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    @provide(scope=Scope.REQUEST)
    def get_activity_repository(self, session: AsyncSession) -> ActivityRepository:
        """Provide SQL activity repository on SQLite."""
        return SqlActivityRepository(session)

    @provide(scope=Scope.APP)
    def get_user_repository(self) -> UserRepository:
        """Provide in-memory user repository."""
        return InMemoryUserRepository()

    @provide(scope=Scope.APP)
    def get_profile_repository(self) -> ProfileRepository:
        """Provide in-memory profile repository."""
        return InMemoryProfileRepository()
