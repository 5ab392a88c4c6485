"""
Database Connection Module
Builds the SQLAlchemy async engine and session factory used by DatabaseStorage.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from orderpad.core.config import Settings

logger = logging.getLogger(__name__)


# Base class for all our models
class Base(DeclarativeBase):
    pass


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured database.

    SQLite URLs get the driver's default pool; pool sizing only
    applies to server databases.
    """
    engine_kwargs = {"echo": settings.database_echo}
    if not settings.database_url.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
        )

    engine = create_async_engine(settings.database_url, **engine_kwargs)
    logger.debug(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory - creates new database sessions."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False  # Objects remain accessible after commit
    )


async def init_db(engine: AsyncEngine) -> None:
    """
    Create all tables in database.
    Called once at application startup.
    """
    # Register the tables on Base.metadata
    import orderpad.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")
