"""Database session management.

The snapshot store runs on PostgreSQL (asyncpg) in deployments and on a
SQLite file (aiosqlite) for local use; pool sizing only applies to the
former.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lookthrough.core.config import settings

logger = logging.getLogger(__name__)


def engine_options(database_url: str) -> dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` suited to the backend."""
    options: dict[str, Any] = {"echo": settings.DB_ECHO}
    if make_url(database_url).get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_pre_ping=True,
        )
    return options


engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session: committed after the handler, rolled back on error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def transactional(
    db: AsyncSession,
    *,
    commit: bool = True,
) -> AsyncGenerator[AsyncSession, None]:
    """Run a block of repository calls as one unit of work.

    Args:
        db: The database session
        commit: Commit when the block succeeds (default: True)

    Raises:
        Exception: Whatever the block raised, after rolling back

    Example:
        ```python
        async with transactional(db):
            await repo.replace_positions(portfolio, positions)
        ```
    """
    try:
        yield db
        if commit:
            await db.commit()
            logger.debug("Transaction committed")
    except Exception as e:
        await db.rollback()
        logger.error(f"Transaction rolled back: {type(e).__name__}: {e}")
        raise
