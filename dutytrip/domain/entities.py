"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Trip``: enforces valid lifecycle transitions
  (PENDING -> ACTIVE -> COMPLETED).  The authoritative guard is the
  conditional write in the repository; the entity mirrors it for
  in-memory checks.
- ``Principal`` is the request-scoped identity handed from the session
  store to the services.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import TRIP_TRANSITIONS, Role, ServiceTier, TripState
from .errors import InvalidStateTransition


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Principal:
    username: str
    role: Role


def generate_code(digits: int = 4) -> str:
    """Random numeric code without a leading zero (1000-9999 for 4 digits)."""
    low = 10 ** (digits - 1)
    return str(low + secrets.randbelow(9 * low))


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Trip:
    code: str = ""
    service_tier: ServiceTier = ServiceTier.CITY
    state: TripState = TripState.PENDING
    driver_id: Optional[str] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    billed_amount: Optional[int] = None
    night_surcharge: Optional[int] = None

    def transition_to(self, new_state: TripState) -> None:
        """Move to *new_state* if the transition is legal, else raise."""
        allowed = TRIP_TRANSITIONS.get(self.state, set())
        if new_state not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.state.value} to {new_state.value}"
            )
        self.state = new_state

    def start(self, driver_id: str, started_at: datetime) -> None:
        self.transition_to(TripState.ACTIVE)
        self.driver_id = driver_id
        self.started_at = started_at

    def finish(
        self, ended_at: datetime, billed_amount: int, night_surcharge: int
    ) -> None:
        self.transition_to(TripState.COMPLETED)
        self.ended_at = ended_at
        self.billed_amount = billed_amount
        self.night_surcharge = night_surcharge

    @property
    def base_fare(self) -> Optional[int]:
        if self.billed_amount is None:
            return None
        return self.billed_amount - (self.night_surcharge or 0)


@dataclass
class Account:
    username: str
    role: Role = Role.DRIVER
    password_hash: str = ""
