"""Engine and session handling shared by every repository."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from components.core import config

logger = logging.getLogger(__name__)

settings = config.get_settings()
Base = declarative_base()

# Pool tuning only applies to server databases, SQLite uses a single-connection pool
SERVER_POOL_OPTIONS = {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite leaves foreign keys, and so ON DELETE CASCADE, off per connection."""
    @event.listens_for(engine.sync_engine, "connect")
    def _foreign_keys_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class DatabaseManager:
    """Owns the async engine; tests pass their own in-memory engine."""

    def __init__(self, engine: Optional[AsyncEngine] = None) -> None:
        self.engine = engine or self._create_engine()
        self._sessions = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @staticmethod
    def _create_engine() -> AsyncEngine:
        url = settings.async_db_url
        options: dict[str, Any] = {"echo": settings.DEBUG}
        if url.startswith("sqlite"):
            engine = create_async_engine(url, **options)
            enable_sqlite_foreign_keys(engine)
            return engine
        return create_async_engine(url, **options, **SERVER_POOL_OPTIONS)

    def get_session(self) -> async_sessionmaker[AsyncSession]:
        """Session factory bound to the engine."""
        return self._sessions

    async def create_all(self) -> None:
        """Create any tables missing from the database."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.debug("Tables ensured on %s", self.engine.url.render_as_string(hide_password=True))

    @asynccontextmanager
    async def get_db(self) -> AsyncIterator[AsyncSession]:
        """Yield a session, rolling back if the caller raises."""
        async with self._sessions() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
