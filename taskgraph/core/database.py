"""
Database engine and per-request sessions.

Task store writes commit on their own (one task per commit), so the request
session mostly carries reads plus the audit inserts; ``get_session`` only
commits whatever is left over and rolls back on error.
"""

from collections.abc import AsyncGenerator

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from taskgraph.core.config import get_settings

settings = get_settings()
log = structlog.get_logger()

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Create the task graph tables. Development only; production runs migrations."""
    import taskgraph.models  # noqa: F401  registers every table on the metadata

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    log.info("db.tables_created", tables=sorted(SQLModel.metadata.tables))


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception as exc:
            await session.rollback()
            log.warning("db.session_rolled_back", error=type(exc).__name__)
            raise
