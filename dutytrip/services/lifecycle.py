"""
Trip Lifecycle Manager
======================

State machine
-------------
  PENDING --claim(code, driver)--> ACTIVE --complete(code)--> COMPLETED

Concurrency safety
------------------
There are no in-process locks.  Both transitions are single conditional
writes against the store (see ``TripRepository``):

* ``claim``    -- ``UPDATE ... WHERE code = :c AND state = 'pending'``.
  Two concurrent claims of one code: the second matches zero rows and
  fails, so at most one claim per code ever succeeds.
* ``complete`` -- settles from the persisted ``started_at`` and then
  ``UPDATE ... WHERE code = :c AND state = 'active'``.  A retry after a
  successful completion fails with ``NotActiveError`` instead of billing
  twice.

Every operation is a single attempt; retrying is the caller's decision
and simply re-runs the guarded transition.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Optional

from dutytrip.domain.clock import Clock, localize, system_clock
from dutytrip.domain.entities import Trip, generate_code
from dutytrip.domain.enums import ServiceTier, TripState
from dutytrip.domain.errors import (
    DuplicateCodeError,
    InvalidCodeError,
    NotActiveError,
)
from dutytrip.domain.settlement import Settlement, SettlementCalculator
from dutytrip.infrastructure.repositories import TripRepository

logger = logging.getLogger(__name__)


class TripLifecycleManager:
    def __init__(
        self,
        trips: TripRepository,
        calculator: SettlementCalculator,
        tz: tzinfo,
        clock: Optional[Clock] = None,
        code_digits: int = 4,
        code_attempts: int = 5,
    ):
        self.trips = trips
        self.calculator = calculator
        self.tz = tz
        self.clock = clock or system_clock(tz)
        self.code_digits = code_digits
        self.code_attempts = code_attempts

    # ── Transitions ───────────────────────────────────────────────

    async def claim(self, code: Optional[str], driver_id: str) -> Trip:
        """PENDING -> ACTIVE.  Any failure is a generic ``InvalidCodeError``."""
        code = (code or "").strip()
        if not code:
            raise InvalidCodeError()

        row = await self.trips.claim_pending(code, driver_id, self.clock())
        if row is None:
            logger.info("Claim rejected for driver %s", driver_id)
            raise InvalidCodeError()

        trip = self._entity(row)
        logger.info("Trip %s claimed by driver %s", trip.code, driver_id)
        return trip

    async def complete(self, code: str) -> Trip:
        """ACTIVE -> COMPLETED, settling the fare exactly once."""
        row = await self.trips.get_by_code(code)
        if row is None:
            raise NotActiveError(code)

        trip = self._entity(row)
        if trip.state is not TripState.ACTIVE or trip.started_at is None:
            raise NotActiveError(code)

        ended_at = self.clock()

        settlement = self.calculator.settle(
            trip.service_tier, trip.started_at, ended_at
        )
        # In-memory mirror of the guard; the write below is authoritative
        trip.finish(ended_at, *settlement)

        row = await self.trips.complete_active(
            code, ended_at, settlement.billed_amount, settlement.night_surcharge
        )
        if row is None:
            logger.warning("Trip %s was completed concurrently", code)
            raise NotActiveError(code)

        completed = self._entity(row)
        logger.info(
            "Trip %s completed: billed=%d night_surcharge=%d",
            code,
            settlement.billed_amount,
            settlement.night_surcharge,
        )
        return completed

    # ── Issuance / administration ─────────────────────────────────

    async def issue(
        self,
        service_tier: ServiceTier,
        code: Optional[str] = None,
        driver_id: Optional[str] = None,
    ) -> Trip:
        """Create a PENDING trip.  Generates a code when none is given."""
        if code is not None:
            row = await self.trips.insert_pending(code.strip(), service_tier, driver_id)
        else:
            row = await self._insert_with_generated_code(service_tier, driver_id)
        trip = self._entity(row)
        logger.info("Issued %s trip %s", trip.service_tier.value, trip.code)
        return trip

    async def _insert_with_generated_code(
        self, service_tier: ServiceTier, driver_id: Optional[str]
    ):
        candidate = ""
        for _ in range(self.code_attempts):
            candidate = generate_code(self.code_digits)
            try:
                return await self.trips.insert_pending(
                    candidate, service_tier, driver_id
                )
            except DuplicateCodeError:
                logger.debug("Generated code %s already taken", candidate)
        raise DuplicateCodeError(candidate)

    async def remove(self, code: str) -> bool:
        removed = await self.trips.delete(code)
        if removed:
            logger.info("Trip %s removed", code)
        return removed

    # ── Read-only queries ─────────────────────────────────────────

    async def find_active_for_driver(self, driver_id: str) -> Optional[Trip]:
        """Session recovery: the driver's ACTIVE trip, if any.  Never mutates."""
        row = await self.trips.get_active_by_driver(driver_id)
        return self._entity(row) if row else None

    async def get(self, code: str) -> Optional[Trip]:
        row = await self.trips.get_by_code(code)
        return self._entity(row) if row else None

    async def list_trips(self) -> list[Trip]:
        return [self._entity(row) for row in await self.trips.list_trips()]

    def preview_settlement(
        self,
        service_tier: ServiceTier,
        started_at: Optional[datetime],
        ended_at: Optional[datetime],
    ) -> Settlement:
        """Non-mutating settlement, e.g. for a running duty."""
        return self.calculator.settle(
            service_tier,
            localize(started_at, self.tz),
            localize(ended_at, self.tz),
        )

    def now(self) -> datetime:
        return self.clock()

    # ── Helpers ───────────────────────────────────────────────────

    def _entity(self, row) -> Trip:
        trip = row.to_entity()
        trip.started_at = localize(trip.started_at, self.tz)
        trip.ended_at = localize(trip.ended_at, self.tz)
        return trip
