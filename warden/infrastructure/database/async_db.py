"""
Asynchronous database utilities.

Builds the asyncpg engine from settings and hands out `AsyncSession`
instances. Each repository call runs inside one of these sessions and commits
or rolls back before returning.

**Security Note**: Never log DATABASE_URL; it carries the database password
(OWASP A09:2021 - Security Logging and Monitoring Failures).
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from structlog import get_logger

from warden.core.config.settings import settings
from warden.infrastructure.database import models  # noqa: F401  registers the tables

logger = get_logger(__name__)


def build_async_url(url: Optional[str] = None) -> str:
    """Return the configured URL with the asyncpg driver selected."""
    url = url or settings.DATABASE_URL
    for sync_driver in ("postgresql+psycopg2://", "postgresql+psycopg://", "postgresql://", "postgres://"):
        if url.startswith(sync_driver):
            return "postgresql+asyncpg://" + url[len(sync_driver):]
    return url


def create_engine_from_settings(url: Optional[str] = None) -> AsyncEngine:
    return create_async_engine(build_async_url(url), pool_pre_ping=True, future=True)


engine = create_engine_from_settings()

AsyncSessionFactory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield an AsyncSession, rolling back if the body raises.

    Yields:
        AsyncSession: A session for one unit of work.
    """
    async with AsyncSessionFactory() as session:
        logger.debug("Async database session created")
        try:
            yield session
        except Exception:
            await session.rollback()
            logger.error("Async database session rollback due to error")
            raise
        finally:
            logger.debug("Async database session closed")


async def create_db_and_tables() -> None:
    """Create the users and tokens tables (test and development setups only)."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables created")
