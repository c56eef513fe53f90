"""Database engine and session factory for the profile store."""

from typing import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import settings


def connect_args_for(database_url: str) -> dict:
    """Driver arguments for ``database_url``.

    Supavisor in transaction mode hands each statement to a different
    backend, which breaks asyncpg's prepared statement cache.
    """
    url = make_url(database_url)
    if url.get_backend_name() != "postgresql":
        return {}
    if url.host and url.host.endswith("pooler.supabase.com"):
        return {"statement_cache_size": 0}
    return {}


engine = create_async_engine(
    settings.async_database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    connect_args=connect_args_for(settings.async_database_url),
)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with async_session_factory() as session:
        yield session


async def dispose_engine() -> None:
    """Close pooled connections on shutdown."""
    await engine.dispose()
