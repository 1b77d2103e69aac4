"""
Database Engine and Session Management

Async SQLAlchemy engine shared by the API, the release sweeps and scripts.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tutorgate.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a database session.

    Handlers commit explicitly; uncommitted work is rolled back on close.
    """
    async with SessionLocal() as session:
        yield session


async def close_db() -> None:
    """Dispose of the connection pool."""
    await engine.dispose()
