"""
Database configuration.

Async SQLAlchemy engine and session factory shared by the index repositories.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from flowdex.config.settings import settings


def create_engine(database_url: str | None = None) -> AsyncEngine:
    """Create async engine for the index database."""
    return create_async_engine(
        database_url or settings.database_url,
        echo=settings.database_echo,
    )


def create_session_maker(
    engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Create session maker bound to the given engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async_engine = create_engine()
async_session_maker = create_session_maker(async_engine)


async def init_db(engine: AsyncEngine | None = None) -> None:
    """
    Create all index tables.

    Args:
        engine: Engine to use (defaults to the application engine)
    """
    from flowdex.models import Base

    engine = engine or async_engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    logger.success("Index tables created/verified")
