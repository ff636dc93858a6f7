"""Catalog Database — async engine, rollback-on-error sessions and schema bootstrap.

Invariants:
    - A session that raises is rolled back before the error leaves session()
    - Every SQLAlchemy failure surfaces as DatabaseError (core/errors.py), tagged
      with the phase that failed (commit / execute / query)
    - Pool sizing only applies to server databases; SQLite keeps the driver default

Design Decisions:
    - create_tables() instead of migrations: the catalog is one table whose
      body column is schemaless JSON
    - Module-level db_manager set by init_db(): the FastAPI lifespan owns it,
      route dependencies reach it through get_db_manager()
    - expire_on_commit=False: rows are read after commit outside the session
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from chartdb_sync.core.errors import DatabaseError
from chartdb_sync.db.base import Base

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError are DBAPIErrors
_FAILURE_KINDS: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "commit", "Diagram row violates a catalog constraint"),
    (OperationalError, "execute", "Catalog database unreachable"),
    (DBAPIError, "query", "Catalog driver error"),
    (SQLAlchemyError, "query", "Catalog operation failed"),
)


def _classify(error: SQLAlchemyError) -> tuple[str, str]:
    for kind, operation, message in _FAILURE_KINDS:
        if isinstance(error, kind):
            return operation, message
    return "query", "Catalog operation failed"


def _engine_options(database_url: str, pool_size: int, max_overflow: int) -> dict:
    options: dict = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        return options
    options.update(
        pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
    )
    return options


class DatabaseSessionManager:
    """Owns the async engine behind the diagram catalog."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = create_async_engine(
            database_url,
            **_engine_options(database_url, pool_size, max_overflow),
        )
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            operation, message = _classify(e)
            logger.error(
                f"Catalog {operation} failed: {e}",
                extra={"operation": operation},
            )
            raise DatabaseError(message, operation) from e
        finally:
            await session.close()

    async def create_tables(self) -> None:
        """Create the catalog table if it is missing."""
        import chartdb_sync.models  # noqa: F401
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """True when a trivial query round-trips (readiness probe)."""
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
        except DatabaseError:
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
        raise RuntimeError("Catalog database not initialized (call init_db first)")
    return db_manager
