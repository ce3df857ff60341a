"""
Back Office Reporting - Database Configuration

Async engine and sessions over the ledger database. The reporting layer
only reads: request sessions are never committed, and whatever
transaction a request opened is rolled back when it ends.
"""

from typing import AsyncGenerator

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from backoffice.config import settings


# Constraint names the alembic revision relies on
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}


class Base(DeclarativeBase):
    """Declarative base of the ledger mapping."""
    metadata = MetaData(naming_convention=convention)


engine = create_async_engine(
    settings.database_url_async,
    echo=settings.database_echo,
    pool_pre_ping=True,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped read session for FastAPI's Depends()."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()


async def init_db():
    """
    Create the mapped tables on the configured database.

    Development only; deployments run the alembic revision instead.
    """
    import backoffice.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    """Dispose of the engine's connection pool."""
    await engine.dispose()
