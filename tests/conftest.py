"""Shared fixtures: in-memory SQLite record store, users, frozen clock."""
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from core.models.base import Base
from patterns.domain_config import TaskTrackerConfig
from verticals.tasks.analytics import AnalyticsAggregator
from verticals.tasks.models import db_models  # noqa: F401  registers tables
from verticals.tasks.repository import UserRepository
from verticals.tasks.service import TaskService

NOW = datetime(2024, 5, 20, 12, 0, tzinfo=timezone.utc)  # a Monday


class FrozenClock:
    """Callable clock whose time the test moves by hand."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def service(session, clock):
    return TaskService(session, config=TaskTrackerConfig.default(), clock=clock)


async def _make_user(session, name: str):
    return await UserRepository(session).create(
        {"name": name, "email": f"{name.lower()}@example.com"}
    )


@pytest_asyncio.fixture
async def owner(session):
    return await _make_user(session, "Olivia")


@pytest_asyncio.fixture
async def assignee(session):
    return await _make_user(session, "Arjun")


@pytest_asyncio.fixture
async def other(session):
    return await _make_user(session, "Bea")


@pytest_asyncio.fixture
async def stranger(session):
    return await _make_user(session, "Sam")


@pytest.fixture
def assert_counters_live(session):
    """Assert each user's stored counters equal a from-scratch recount."""
    aggregator = AnalyticsAggregator(session)

    async def check(*users):
        for user in users:
            expected = await aggregator.recompute(user.id)
            assert user.analytics() == expected, user.name

    return check
