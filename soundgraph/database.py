"""
Async SQLAlchemy engine + session factory for TiDB (MySQL-protocol).

One request gets one session and one transaction. Handlers that write
call `commit_request()` themselves before returning, so a failed commit
becomes a StorageFailure response instead of being lost after the
response has gone out. `get_db` only cleans up: it rolls back whatever
was left uncommitted when the handler raised.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from soundgraph.config import settings
from soundgraph.engine.errors import StorageFailure

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.tidb_url,
    pool_pre_ping=True,
    pool_size=20,
    max_overflow=10,
    echo=False,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def init_db() -> None:
    """Create the graph, content and playlist tables if missing."""
    # Import for the side effect of registering the mapped tables
    import soundgraph.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")


async def commit_request(db: AsyncSession) -> None:
    """Commit the request transaction, surfacing failures as StorageFailure."""
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        logger.error("Commit failed: %s", exc)
        raise StorageFailure("Storage unavailable (commit)") from exc


async def get_db():
    """FastAPI dependency that yields the request's AsyncSession."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
