"""
Database Connection Module
Handles the SQLAlchemy async engine, session factory and declarative base.
"""

import logging
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.core.errors import ConflictError

logger = logging.getLogger(__name__)


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for ``url``.

    SQLite (tests, local demos) shares one connection; server databases get
    a connection pool.
    """
    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(
        url,
        echo=echo,
        pool_size=5,  # Connection pool size
        max_overflow=10,  # Extra connections when pool is full
        pool_pre_ping=True,
    )


settings = get_settings()

engine = build_engine(settings.database_url, echo=settings.database_echo)

# Session factory - creates new database sessions
async_session_maker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False  # Objects remain accessible after commit
)


# Base class for all our models
class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Dependency injection for FastAPI routes.
    Yields a database session and ensures cleanup.
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def commit(session: AsyncSession, entity: str = "Resource") -> None:
    """
    Commit the unit of work, reporting lost updates as conflicts.

    Versioned rows (carts, orders) raise StaleDataError when another request
    changed them since they were loaded.
    """
    try:
        await session.commit()
    except StaleDataError:
        await session.rollback()
        logger.info(f"{entity} was modified concurrently; rolled back")
        raise ConflictError(f"{entity} was modified concurrently, please retry")
    except IntegrityError as e:
        await session.rollback()
        logger.info(f"Integrity error on {entity}: {e.orig}")
        raise ConflictError(f"{entity} conflicts with an existing record")


async def init_db(bind: AsyncEngine = engine) -> None:
    """
    Create all tables in database.
    Called once at application startup.
    """
    # Register models on the metadata before create_all
    import app.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")
