"""
Blogwrite Backend — Database Session Management
================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI session dependency.
How:   `Database` owns one async engine plus its session factory. The app factory
       constructs it from Settings and stores it on `app.state.database`; the
       `get_db_session` dependency opens one session per request that commits
       on success and rolls back on error.

Connection Pooling (PostgreSQL):
    pool_size=20, max_overflow=10 → at most 30 connections per worker
    pool_pre_ping validates connections before use
    pool_recycle=3600 recycles connections hourly
SQLite (tests, local dev) uses the dialect's default pool.
"""

import logging
from contextlib import contextmanager
from typing import AsyncGenerator, Iterator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    stop_after_attempt,
    wait_exponential,
)

from blogwrite.config import Settings
from blogwrite.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations.
    """
    pass


class Database:
    """
    Engine and session factory for one application instance.

    Attributes:
        engine:          AsyncEngine managing the connection pool
        session_factory: async_sessionmaker producing request-scoped sessions
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: AsyncEngine = create_async_engine(
            settings.database_url,
            echo=settings.log_level == "DEBUG",
            **self._pool_options(settings),
        )
        # expire_on_commit=False: response models are built from ORM objects
        # after the flush, outside of any lazy-load context
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @staticmethod
    def _pool_options(settings: Settings) -> dict:
        if settings.is_sqlite:
            return {}
        return {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_pre_ping": settings.db_pool_pre_ping,
            "pool_recycle": 3600,
        }

    async def ping(self) -> None:
        """Runs SELECT 1; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def wait_until_ready(self) -> None:
        """
        Blocks startup until the database answers, with exponential backoff.

        Raises the last connection error once retry_max_attempts is exhausted.
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.settings.retry_max_attempts),
            wait=wait_exponential(
                multiplier=1,
                min=self.settings.retry_min_wait,
                max=self.settings.retry_max_wait,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                await self.ping()

    async def create_all(self) -> None:
        """Creates every table registered on Base.metadata (tests, local dev)."""
        # Model modules must be imported so their tables are registered
        from blogwrite import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Closes all pooled connections (application shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    1. Opens a session from the app's Database
    2. Yields it to the route handler
    3. Commits on success, rolls back on any error, always closes

    Example usage in a route:
        @router.get("/blogs")
        async def list_blogs(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@contextmanager
def translate_db_errors(operation: str) -> Iterator[None]:
    """
    Converts SQLAlchemy failures inside the block into DatabaseError.

    Application exceptions raised inside the block propagate unchanged.
    The original error is logged server-side; clients only see a generic message.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
        raise DatabaseError(
            context={"operation": operation, "error_type": type(e).__name__},
        ) from e
