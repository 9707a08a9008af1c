"""Domain enumerations and state-transition rules."""

import enum


class TripState(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


# State machine: maps current state -> set of valid next states
TRIP_TRANSITIONS: dict[TripState, set[TripState]] = {
    TripState.PENDING: {TripState.ACTIVE},
    TripState.ACTIVE: {TripState.COMPLETED},
    TripState.COMPLETED: set(),
}


class ServiceTier(str, enum.Enum):
    CITY = "city"
    OUTSTATION = "outstation"


class Role(str, enum.Enum):
    DRIVER = "driver"
    ADMIN = "admin"
