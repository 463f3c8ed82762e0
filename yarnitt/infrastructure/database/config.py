"""
Database configuration.

Builds the async engine and session factory from DatabaseSettings.
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from yarnitt.data.models import Base
from yarnitt.settings import DatabaseSettings

logger = logging.getLogger(__name__)


# =============================================================================
# ENGINE CREATION
# =============================================================================

def create_engine(settings: Optional[DatabaseSettings] = None) -> AsyncEngine:
    """
    Create async SQLAlchemy engine.

    Args:
        settings: Database settings (loaded from DB_* env if omitted)

    Returns:
        Configured async engine
    """
    settings = settings or DatabaseSettings()
    logger.info(f"Creating database engine: {settings.database_url.split('@')[-1]}")

    if settings.is_sqlite:
        return create_async_engine(settings.database_url, echo=settings.echo_sql)

    return create_async_engine(
        settings.database_url,
        echo=settings.echo_sql,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_recycle=settings.pool_recycle,
        pool_pre_ping=True,  # Test connections before using
    )


# Global engine instance
_engine: Optional[AsyncEngine] = None


def get_engine(settings: Optional[DatabaseSettings] = None) -> AsyncEngine:
    """
    Get or create global engine instance.

    Returns:
        Global async engine
    """
    global _engine

    if _engine is None:
        _engine = create_engine(settings)

    return _engine


# =============================================================================
# SESSION FACTORY
# =============================================================================

def get_session_factory(engine: Optional[AsyncEngine] = None) -> async_sessionmaker:
    """
    Get session factory.

    Args:
        engine: Engine to bind (global engine if omitted)

    Returns:
        Session factory for creating sessions
    """
    return async_sessionmaker(
        bind=engine or get_engine(),
        expire_on_commit=False,
        autoflush=False,
    )


# =============================================================================
# LIFECYCLE
# =============================================================================

async def init_database(engine: Optional[AsyncEngine] = None) -> None:
    """Create all tables (idempotent)."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


async def close_database() -> None:
    """Dispose the global engine."""
    global _engine

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        logger.info("Database engine disposed")
