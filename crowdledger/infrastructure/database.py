"""Database Session Manager — pooled async engine and error-mapped sessions.

Invariants:
    - A session that exits with an exception is rolled back before it is closed
    - A session that is closed without commit leaves nothing behind, including when
      the awaiting task is cancelled mid-transaction (ledger timeouts rely on this)
    - Driver and ORM failures surface as StoreUnavailableError, never as raw
      SQLAlchemy exceptions; CrowdLedgerError raised inside a session passes through

Design Decisions:
    - One process-wide db_manager installed by the FastAPI lifespan, read through
      get_db_manager() so tests can swap it
    - expire_on_commit=False: snapshots built from ORM rows stay readable after commit
    - SQLite URLs get the default pool; pool sizing applies to PostgreSQL only
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)

from crowdledger.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError are DBAPIErrors
_STORE_FAILURES: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Integrity constraint violated", "commit"),
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
    (SQLAlchemyError, "Database operation failed", "unknown"),
)


def _as_store_error(exc: SQLAlchemyError) -> StoreUnavailableError:
    for exc_type, message, operation in _STORE_FAILURES:
        if isinstance(exc, exc_type):
            return StoreUnavailableError(message, operation)
    return StoreUnavailableError("Database operation failed", "unknown")


class DatabaseSessionManager:
    """Owns the engine; hands out sessions that roll back and map errors."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        options: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            options.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self._bind(create_async_engine(database_url, **options))

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> "DatabaseSessionManager":
        """Wrap an engine built elsewhere (test fixtures, scripts)."""
        manager = cls.__new__(cls)
        manager._bind(engine)
        return manager

    def _bind(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            store_error = _as_store_error(e)
            logger.error(
                f"{store_error.message}: {e}",
                extra={"error_code": store_error.code},
            )
            raise store_error from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """True when the database answers SELECT 1."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except (StoreUnavailableError, OSError) as e:
            logger.error(f"DB health check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


def get_db_manager() -> DatabaseSessionManager:
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with get_db_manager().session() as session:
        yield session
