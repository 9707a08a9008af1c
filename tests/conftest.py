"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  SQLite returns naive timestamps; the
lifecycle manager re-attaches the configured zone, exactly as it does for
any store that drops tz info.
"""

from datetime import datetime, timedelta
from typing import AsyncGenerator
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from dutytrip.domain.settlement import SettlementCalculator
from dutytrip.infrastructure.database import Base
from dutytrip.infrastructure.repositories import TripRepository
from dutytrip.services.lifecycle import TripLifecycleManager

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TZ = ZoneInfo("Asia/Kolkata")


class SteppingClock:
    """Deterministic clock; tests move it forward explicitly."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)

    def set(self, moment: datetime) -> None:
        self.current = moment


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock(datetime(2024, 3, 1, 18, 10, tzinfo=TZ))


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Create tables on a fresh in-memory DB, yield a session factory."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def lifecycle(db_session, clock) -> TripLifecycleManager:
    return TripLifecycleManager(
        TripRepository(db_session),
        SettlementCalculator(tz=TZ),
        TZ,
        clock=clock,
    )
