"""Database engine and session management."""
from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from campus_complaints.core.config import settings
from campus_complaints.core.logging import get_logger
from campus_complaints.models import Base

logger = get_logger(__name__)


def create_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> AsyncEngine:
    """
    Create an async engine for ``database_url`` (defaults to settings).

    In-memory SQLite URLs share a single connection so every session sees
    the same database.
    """
    url = database_url or settings.database.DATABASE_URL
    kwargs = {
        "echo": settings.database.DB_ECHO if echo is None else echo,
    }
    if url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:")):
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    elif not url.startswith("sqlite"):
        kwargs["pool_pre_ping"] = True

    engine = create_async_engine(url, **kwargs)
    logger.info(f"Created async database engine: {engine.url.drivername}")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Session factory bound to ``engine``; sessions keep loaded state after commit."""
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet (use migrations in production)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema initialized")
