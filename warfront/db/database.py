"""
Database engine and session management.

Services only flush. The request-scoped session from `get_session` owns the
transaction, so every write of one request (a claimed flag plus the owned
copy, a joined battle plus the host's notification) lands or vanishes as a
unit. Jobs open their own sessions from `async_session_factory`.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from warfront.config import settings
from warfront.models.db import Base

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session dependency.

    Commits when the handler returns. Any exception, including a business
    rule failure raised after a flush, rolls the whole request back.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create missing tables. Called once from the app lifespan."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
