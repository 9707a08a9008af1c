"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - the bootstrap admin account (ADMIN_USERNAME / ADMIN_PASSWORD)
  - 4 sample drivers (password: "driver123")
  - 6 sample trips (mix of pending, active, completed; city and outstation)
"""

import asyncio
from datetime import datetime, timedelta

from sqlalchemy import text

from dutytrip.config import settings
from dutytrip.domain.clock import zone
from dutytrip.domain.enums import Role, ServiceTier, TripState
from dutytrip.domain.settlement import SettlementCalculator
from dutytrip.infrastructure.database import async_session_factory, engine
from dutytrip.infrastructure.models import AccountModel, TripModel
from dutytrip.services.accounts import hash_password

TZ = zone(settings.timezone)

DRIVERS = ["ravi", "suresh", "farhan", "lakshmi"]

TRIPS = [
    # (code, tier, state, driver, start offset, duration)
    ("4821", ServiceTier.CITY, TripState.PENDING, None, None, None),
    ("7310", ServiceTier.OUTSTATION, TripState.PENDING, "farhan", None, None),
    ("5562", ServiceTier.CITY, TripState.ACTIVE, "ravi", timedelta(hours=-2), None),
    # 2 h city duty ending 18:00 -> 4 h minimum, 600
    ("1904", ServiceTier.CITY, TripState.COMPLETED, "suresh", None, timedelta(hours=2)),
    # 5 h city duty ending 23:10 -> 750 + 200 night surcharge
    ("3377", ServiceTier.CITY, TripState.COMPLETED, "lakshmi", None, timedelta(hours=5)),
    # 13 h outstation duty -> 2 blocks, 3000
    ("9046", ServiceTier.OUTSTATION, TripState.COMPLETED, "farhan", None, timedelta(hours=13)),
]

END_TIMES = {
    "1904": (18, 0),
    "3377": (23, 10),
    "9046": (20, 30),
}


async def seed():
    calculator = SettlementCalculator.from_settings(settings, tz=TZ)
    now = datetime.now(TZ).replace(microsecond=0)
    yesterday = now - timedelta(days=1)

    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM accounts"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Accounts ──────────────────────────────────────────────────
        session.add(
            AccountModel(
                username=settings.admin_username,
                password_hash=hash_password(settings.admin_password),
                role=Role.ADMIN,
            )
        )
        for username in DRIVERS:
            session.add(
                AccountModel(
                    username=username,
                    password_hash=hash_password("driver123"),
                    role=Role.DRIVER,
                )
            )
        await session.flush()
        print(f"  Created 1 admin and {len(DRIVERS)} drivers")

        # ── Trips ─────────────────────────────────────────────────────
        for code, tier, state, driver, start_offset, duration in TRIPS:
            trip = TripModel(
                code=code, service_tier=tier, state=state, driver_id=driver
            )
            if state is TripState.ACTIVE:
                trip.started_at = now + start_offset
            elif state is TripState.COMPLETED:
                hour, minute = END_TIMES[code]
                ended_at = yesterday.replace(hour=hour, minute=minute, second=0)
                started_at = ended_at - duration
                billed, night = calculator.settle(tier, started_at, ended_at)
                trip.started_at = started_at
                trip.ended_at = ended_at
                trip.billed_amount = billed
                trip.night_surcharge = night
            session.add(trip)
        await session.flush()
        print(f"  Created {len(TRIPS)} trips")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
