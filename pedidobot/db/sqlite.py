"""
SQLite database for the order ledger and session records.
Uses async SQLAlchemy (aiosqlite) so storage never blocks message handling.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from pedidobot.config import settings
from pedidobot.db.models import Base

# Seconds a writer waits for the file lock before failing
BUSY_TIMEOUT = 5


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    """WAL lets the sweeper read sessions while an order is being written."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT * 1000}")
    cursor.close()


class Database:
    """Owns the async engine; tables are created on first use."""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.db_url
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_ready(self) -> bool:
        return self._engine is not None

    def _file_path(self) -> Optional[Path]:
        """Database file of a SQLite URL, None for other backends and in-memory DBs."""
        url = make_url(self.url)
        if not url.drivername.startswith("sqlite") or url.database in (None, "", ":memory:"):
            return None
        return Path(url.database)

    async def init(self) -> None:
        """Create the engine and the orders/sessions tables. Safe to call twice."""
        if self.is_ready:
            return

        path = self._file_path()
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)

        self._engine = create_async_engine(self.url, echo=settings.debug)
        if path is not None:
            event.listen(self._engine.sync_engine, "connect", _set_sqlite_pragmas)

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            expire_on_commit=False,
            autoflush=False,
        )

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Dispose the engine; the next session re-initializes it."""
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_factory = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Unit of work: committed on success, rolled back on any error."""
        if not self.is_ready:
            await self.init()

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


# Global database instance
db = Database()
