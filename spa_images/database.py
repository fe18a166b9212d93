"""
SPA Images Backend: Database Session Management
================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine (pooled for server databases), provides a
       session dependency that commits on success, rolls back on error and
       always closes the session.
Who:   The image dispatch endpoint receives a session via Depends(); the
       storage service runs its queries on it.
When:  Engine is created at module import; sessions are created per-request.

Connection Pooling:
    pool_size / max_overflow: from settings (defaults 10 + 10)
    pool_pre_ping:            validates connections before use
    pool_recycle=3600:        recycles connections every hour

    SQLite URLs skip the pool arguments; aiosqlite picks its own pool class.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from spa_images.config import settings


# ── Engine Configuration ──────────────────────────────────────────────────
_engine_args: Dict[str, Any] = {
    # Echo SQL only when debugging
    "echo": settings.log_level == "DEBUG",
}

if not settings.is_sqlite:
    _engine_args.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )

engine = create_async_engine(settings.database_url, **_engine_args)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after commit, so records
# can be serialized once the transaction is done.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler (the handler performs queries)
        3. On success: commits whatever is still pending
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)

    The storage service commits its own writes before reporting success, so
    the commit here normally has nothing left to flush.

    Example usage in a route:
        @router.get("/images")
        async def get_images(db: AsyncSession = Depends(get_db_session)):
            return await image_service.list_images(db)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_tables() -> None:
    """
    What:  Creates every table registered on Base.metadata if missing.
    When:  Called during application startup when settings.create_tables is set.
    How:   metadata.create_all is CREATE TABLE IF NOT EXISTS per table.
    """
    # Models must be imported so they register on Base.metadata
    from spa_images.models import image  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
