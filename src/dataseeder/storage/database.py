"""
Async database engine and session factory helpers
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from dataseeder.core.config.settings import settings
from dataseeder.core.exceptions.custom_exceptions import StorageError
from dataseeder.core.logging.logger import get_logger

logger = get_logger(__name__)


def create_engine(url: Optional[str] = None, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for ``url``, defaulting to the configured database.

    Raises:
        StorageError: If the URL is invalid or names a driver that is not
            installed
    """
    url = url or settings.DATABASE_URL
    try:
        engine = create_async_engine(url, echo=echo)
    except Exception as e:
        raise StorageError(f"Failed to create database engine: {e}") from e

    logger.debug("Database engine created", dialect=engine.dialect.name)
    return engine


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    """Session factory producing ``AsyncSession`` objects bound to ``engine``"""
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
