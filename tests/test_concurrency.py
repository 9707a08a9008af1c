"""
Concurrency safety tests.

Demonstrates:
1. Many simultaneous claims of one code: exactly one succeeds, because the
   claim is a single conditional UPDATE (no read-then-write).
2. Simultaneous completions settle once.
3. The Redis session store (mocked Redis) issues, resolves and revokes
   request-scoped principals.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from dutytrip.domain.entities import Principal
from dutytrip.domain.enums import Role, ServiceTier, TripState
from dutytrip.domain.errors import InvalidCodeError, NotActiveError
from dutytrip.domain.settlement import SettlementCalculator
from dutytrip.infrastructure.database import Base
from dutytrip.infrastructure.repositories import TripRepository
from dutytrip.infrastructure.sessions import SessionStore
from dutytrip.services.lifecycle import TripLifecycleManager

TZ = ZoneInfo("Asia/Kolkata")
START = datetime(2024, 3, 1, 18, 10, tzinfo=TZ)


@pytest_asyncio.fixture
async def file_factory(tmp_path):
    """File-backed SQLite so each session gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


def _manager(session: AsyncSession) -> TripLifecycleManager:
    return TripLifecycleManager(
        TripRepository(session), SettlementCalculator(tz=TZ), TZ, clock=lambda: START
    )


class TestConcurrentClaims:
    @pytest.mark.asyncio
    async def test_at_most_one_claim_per_code(self, file_factory):
        async with file_factory() as session:
            await _manager(session).issue(ServiceTier.CITY, code="4821")
            await session.commit()

        async def attempt(driver: str):
            async with file_factory() as session:
                try:
                    trip = await _manager(session).claim("4821", driver)
                except InvalidCodeError:
                    await session.rollback()
                    return None
                await session.commit()
                return trip

        drivers = [f"driver-{i}" for i in range(8)]
        results = await asyncio.gather(*(attempt(d) for d in drivers))

        winners = [trip for trip in results if trip is not None]
        assert len(winners) == 1

        async with file_factory() as session:
            stored = await _manager(session).get("4821")
        assert stored.state == TripState.ACTIVE
        assert stored.driver_id == winners[0].driver_id

    @pytest.mark.asyncio
    async def test_concurrent_completions_settle_once(self, file_factory):
        async with file_factory() as session:
            manager = _manager(session)
            await manager.issue(ServiceTier.OUTSTATION, code="9046")
            await manager.claim("9046", "farhan")
            await session.commit()

        async def attempt():
            async with file_factory() as session:
                try:
                    trip = await _manager(session).complete("9046")
                except NotActiveError:
                    await session.rollback()
                    return None
                await session.commit()
                return trip

        results = await asyncio.gather(*(attempt() for _ in range(4)))
        completed = [trip for trip in results if trip is not None]
        assert len(completed) == 1
        assert completed[0].billed_amount == 1500


class TestSessionStore:
    """Session store logic against a mocked Redis client."""

    @pytest.mark.asyncio
    async def test_create_sets_key_with_ttl(self):
        mock_redis = AsyncMock()
        store = SessionStore(mock_redis, ttl_seconds=60)

        token = await store.create(Principal("ravi", Role.DRIVER))

        mock_redis.set.assert_awaited_once_with(
            f"session:{token}", "driver:ravi", ex=60
        )

    @pytest.mark.asyncio
    async def test_resolve_returns_principal(self):
        mock_redis = AsyncMock()
        mock_redis.get = AsyncMock(return_value="admin:ops")
        store = SessionStore(mock_redis)

        assert await store.resolve("tok") == Principal("ops", Role.ADMIN)

    @pytest.mark.asyncio
    async def test_resolve_expired(self):
        mock_redis = AsyncMock()
        mock_redis.get = AsyncMock(return_value=None)
        store = SessionStore(mock_redis)

        assert await store.resolve("tok") is None

    @pytest.mark.asyncio
    async def test_resolve_unknown_role(self):
        mock_redis = AsyncMock()
        mock_redis.get = AsyncMock(return_value="superuser:root")
        store = SessionStore(mock_redis)

        assert await store.resolve("tok") is None

    @pytest.mark.asyncio
    async def test_revoke_deletes_key(self):
        mock_redis = AsyncMock()
        store = SessionStore(mock_redis)

        await store.revoke("tok")

        mock_redis.delete.assert_awaited_once_with("session:tok")
