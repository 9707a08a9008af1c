"""
Settlement Engine  (Strategy Pattern)
=====================================

Converts a duty's start / end timestamps into a billed amount.

City tariff
-----------
billed = round_half_up(max(MIN_HOURS, hours) x RATE + night_surcharge)

* ``night_surcharge`` is charged only when the **end** instant's local
  wall-clock hour is >= 22.  Start time and duration are irrelevant.

Outstation tariff
-----------------
billed = max(1, ceil(hours / BLOCK_HOURS)) x BLOCK_RATE

* Any fraction of a block is a full block.
* Never attracts the night surcharge.

Elapsed hours are computed in ``Decimal`` straight from the ``timedelta``
so that e.g. 4h30m36s bills as exactly 676.5 before rounding.

Complexity: O(1) per settlement.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple, Optional

from .enums import ServiceTier
from .errors import ClockSkewError

_SECONDS_PER_HOUR = Decimal(3600)


class Settlement(NamedTuple):
    billed_amount: int
    night_surcharge: int


def elapsed_hours(started_at: datetime, ended_at: datetime) -> Decimal:
    """Exact wall-clock difference in fractional hours."""
    delta: timedelta = ended_at - started_at
    seconds = (
        Decimal(delta.days * 86_400 + delta.seconds)
        + Decimal(delta.microseconds) / Decimal(1_000_000)
    )
    return seconds / _SECONDS_PER_HOUR


def local_hour(moment: datetime, tz: Optional[tzinfo] = None) -> int:
    """Civil clock hour of *moment*, converted to *tz* when it is aware."""
    if tz is not None and moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    return moment.hour


def round_half_up(amount: Decimal) -> int:
    return int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))


# ── Strategy hierarchy ────────────────────────────────────────────────


class Tariff(ABC):
    @abstractmethod
    def settle(self, hours: Decimal, end_hour: int) -> Settlement: ...


class CityTariff(Tariff):
    def __init__(
        self,
        rate_per_hour: int = 150,
        min_hours: int = 4,
        night_surcharge: int = 200,
        night_start_hour: int = 22,
    ):
        self.rate_per_hour = rate_per_hour
        self.min_hours = min_hours
        self.night_surcharge = night_surcharge
        self.night_start_hour = night_start_hour

    def settle(self, hours: Decimal, end_hour: int) -> Settlement:
        billable = max(Decimal(self.min_hours), hours)
        base_fare = billable * self.rate_per_hour
        surcharge = (
            self.night_surcharge if end_hour >= self.night_start_hour else 0
        )
        return Settlement(round_half_up(base_fare + surcharge), surcharge)


class OutstationTariff(Tariff):
    def __init__(self, block_hours: int = 12, block_rate: int = 1500):
        self.block_hours = block_hours
        self.block_rate = block_rate

    def settle(self, hours: Decimal, end_hour: int) -> Settlement:
        # A zero-length duty still books one block
        blocks = max(1, math.ceil(hours / self.block_hours))
        return Settlement(blocks * self.block_rate, 0)


# ── Engine facade ─────────────────────────────────────────────────────


class SettlementCalculator:
    """High-level API used by the lifecycle manager and the API layer."""

    def __init__(
        self,
        city: Optional[CityTariff] = None,
        outstation: Optional[OutstationTariff] = None,
        tz: Optional[tzinfo] = None,
    ):
        self.tariffs: dict[ServiceTier, Tariff] = {
            ServiceTier.CITY: city or CityTariff(),
            ServiceTier.OUTSTATION: outstation or OutstationTariff(),
        }
        self.tz = tz

    @classmethod
    def from_settings(cls, settings, tz: Optional[tzinfo] = None) -> "SettlementCalculator":
        return cls(
            city=CityTariff(
                rate_per_hour=settings.city_rate_per_hour,
                min_hours=settings.city_min_hours,
                night_surcharge=settings.night_surcharge,
                night_start_hour=settings.night_start_hour,
            ),
            outstation=OutstationTariff(
                block_hours=settings.outstation_block_hours,
                block_rate=settings.outstation_block_rate,
            ),
            tz=tz,
        )

    def settle(
        self,
        service_tier: ServiceTier,
        started_at: Optional[datetime],
        ended_at: Optional[datetime],
    ) -> Settlement:
        """Pure: identical inputs always give identical output."""
        if started_at is None or ended_at is None:
            return Settlement(0, 0)
        if ended_at < started_at:
            raise ClockSkewError(
                f"End time {ended_at.isoformat()} precedes start time "
                f"{started_at.isoformat()}"
            )
        hours = elapsed_hours(started_at, ended_at)
        tariff = self.tariffs[ServiceTier(service_tier)]
        return tariff.settle(hours, local_hour(ended_at, self.tz))


_default_calculator = SettlementCalculator()


def settle(
    service_tier: ServiceTier,
    started_at: Optional[datetime],
    ended_at: Optional[datetime],
    tz: Optional[tzinfo] = None,
) -> Settlement:
    """Settle with the default tariffs."""
    if tz is None:
        return _default_calculator.settle(service_tier, started_at, ended_at)
    return SettlementCalculator(tz=tz).settle(service_tier, started_at, ended_at)
