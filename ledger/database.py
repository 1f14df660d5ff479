from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from ledger.config import settings


class Base(DeclarativeBase):
    pass


def create_ledger_engine(database_url: str | None = None) -> AsyncEngine:
    """
    Create the async engine (and its connection pool) for the ledger database.

    SQLite URLs get a NullPool since pool sizing options don't apply to them.

    Args:
        database_url: Overrides settings.DATABASE_URL when given

    Returns:
        AsyncEngine: Engine owning a fresh connection pool
    """
    url = database_url or settings.DATABASE_URL

    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.DB_ECHO, poolclass=NullPool)

    return create_async_engine(
        url,
        echo=settings.DB_ECHO,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
    )
