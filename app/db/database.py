from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from app.core.config import get_settings
from app.core.logging_config import get_logger

logger = get_logger(__name__)

# Global engine (connection pooling handled internally by SQLAlchemy)
_engine: Optional[AsyncEngine] = None


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given URL.
    SQLite has no server-side pool, so pool sizing only applies elsewhere.
    """
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)

    settings = get_settings()
    # pool_size: connections kept ready
    # max_overflow: extra connections allowed under load
    return create_async_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        echo=echo
    )


def get_engine() -> AsyncEngine:
    """Get or create the async engine (singleton pattern)"""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = build_engine(settings.database_url, echo=settings.debug)
    return _engine


async def dispose_engine() -> None:
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


@asynccontextmanager
async def get_db_session(engine: Optional[AsyncEngine] = None) -> AsyncIterator[AsyncConnection]:
    """
    Transactional connection: commits on success, rolls back on error.
    Usage:
        async with get_db_session() as db:
            await db.execute(text("SELECT * FROM users"))
    """
    engine = engine or get_engine()
    async with engine.connect() as conn:
        try:
            yield conn
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise


async def test_database_connection(engine: Optional[AsyncEngine] = None) -> bool:
    """
    Test if the database is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        async with get_db_session(engine) as db:
            result = await db.execute(text("SELECT 1 as test"))
            row = result.fetchone()
            return row[0] == 1
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


async def execute_raw_sql(sql: str, params: dict = None, engine: Optional[AsyncEngine] = None) -> list:
    """
    Execute raw SQL and return results as list of dicts.
    """
    async with get_db_session(engine) as db:
        result = await db.execute(text(sql), params or {})
        return [dict(row) for row in result.mappings().all()]
