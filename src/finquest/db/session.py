"""Async engine and per-request sessions for the FinQuest database."""
from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from finquest.config import settings

# SQL echo is honoured in development only: bound parameters carry mobiles,
# emails and payment identifiers.
async_engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo and settings.app_env.lower() == "development",
    pool_pre_ping=not settings.database_url.startswith("sqlite"),
)

# Objects stay readable after commit; routes serialise them after the service returns.
AsyncSessionLocal = async_sessionmaker(
    async_engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """One session per request, closed when the response is sent."""
    async with AsyncSessionLocal() as session:
        yield session
