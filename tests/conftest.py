from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from backend.database import create_tables, make_sessionmaker
from backend.srs.store import DeckStore


@pytest_asyncio.fixture
async def store(tmp_path: Path) -> AsyncGenerator[DeckStore, None]:
    """A DeckStore backed by a fresh SQLite file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_tables(engine)
    yield DeckStore(make_sessionmaker(engine))
    await engine.dispose()
