"""Service test fixtures - async DB, fake-clock cache, store, resolver, API client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - The cache clock only moves when a test calls clock.advance()
    - get_db and get_format_cache dependencies overridden for route tests

Design Decisions:
    - SQLite in-memory: fast, no external dependency; FK enforcement is off, so
      RESTRICT semantics are covered by the store's own checks
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from idformat.db.base import Base
import idformat.models  # noqa: F401
from idformat.infrastructure.database import get_db
from idformat.main import app
from idformat.services.config_store import FormatConfigStore
from idformat.services.format_cache import FormatCache, get_format_cache
from idformat.services.resolver import FormatResolver


class FakeClock:
    """Monotonic clock that only advances on request."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return FormatCache(ttl_seconds=60.0, clock=clock)


@pytest.fixture
def store(test_db, cache):
    return FormatConfigStore(test_db, cache)


@pytest.fixture
def resolver(store, cache):
    return FormatResolver(store, cache)


@pytest.fixture
async def client(test_session_factory, cache):
    """FastAPI test client with DB and cache dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_format_cache] = lambda: cache

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
