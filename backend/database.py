"""Database engine and session management."""

from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from backend.config import settings
from backend.models import Base


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


engine = create_async_engine(settings.database_url, echo=settings.debug)
async_session = make_sessionmaker(engine)


async def create_tables(bind: AsyncEngine = engine) -> None:
    """Create tables if they don't exist."""
    database = bind.url.database
    if bind.url.get_backend_name() == "sqlite" and database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
