"""Database configuration and session management.

Provides async SQLAlchemy engine and session factory builders. Nothing is
created at import time; the app factory builds an engine only when the
database record store is selected.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

# Base class for models
Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create async engine.

    Args:
        database_url: SQLAlchemy async URL (e.g. postgresql+asyncpg://...).
        echo: Whether to log SQL statements.

    Returns:
        AsyncEngine instance.
    """
    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory bound to an engine.

    Args:
        engine: Async engine.

    Returns:
        Session factory producing AsyncSession objects.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
