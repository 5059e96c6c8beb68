"""Database engine and session management.

The catalog lives in SQLite so that product search can use FTS5
virtual tables next to the relational data. Every connection enables
foreign key enforcement, which SQLite leaves off by default.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from storefront.infrastructure.config import settings


def create_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with per-connection SQLite pragmas.

    Args:
        url: SQLAlchemy database URL (``sqlite+aiosqlite://...``).
        echo: Log emitted SQL.

    Returns:
        Configured async engine.
    """
    new_engine = create_async_engine(url, echo=echo, pool_pre_ping=True)

    @event.listens_for(new_engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return new_engine


engine = create_engine(settings.database_url, echo=settings.debug)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session.

    The session commits when the request succeeds and rolls back when
    it raises.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
