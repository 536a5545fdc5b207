"""
Memos Backend - Database Session Management
============================================

What:  Async SQLAlchemy engine construction, session factory, and the
       per-request session dependency.
How:   `build_engine()` creates an engine from a Settings object; the
       application factory stores the engine and its session factory on
       `app.state`. `get_db_session` yields a session per request that
       commits on success and rolls back on error.
Who:   Used by route handlers via FastAPI's dependency injection system and
       by the test suite to create the schema on a temporary database.

Connection Pooling Strategy (server databases only):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs skip the pool options; aiosqlite manages its own connection.
"""

import functools
import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from memos.config import Settings
from memos.exceptions import DatabaseError, MemosError

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with a single metadata
    object, which Alembic and the test suite use to build the schema.
    """
    pass


# ── Engine Configuration ──────────────────────────────────────────────────
def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine described by `settings`.

    SQL is echoed only when the log level is DEBUG.
    """
    kwargs = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **kwargs)


# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after commit, outside
# the session context
def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the application's factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/memo")
        async def list_memos(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_schema(engine: AsyncEngine) -> None:
    """
    Create every table registered on `Base.metadata` that does not exist yet.

    Production deployments run Alembic migrations instead; this is used for
    SQLite development databases and the test suite.
    """
    # Importing the models package registers every table on Base.metadata
    import memos.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()


# ── Error Translation ─────────────────────────────────────────────────────
def translate_db_errors(operation: str):
    """
    Decorator for async service methods.

    Application errors (MemosError) pass through unchanged; SQLAlchemy
    errors are logged with their traceback and re-raised as a generic
    DatabaseError so SQL never reaches the client.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except MemosError:
                raise
            except SQLAlchemyError as e:
                logger.error("Database error in %s: %s", operation, str(e), exc_info=True)
                raise DatabaseError(
                    context={"operation": operation, "original_error": type(e).__name__},
                )

        return wrapper

    return decorator
