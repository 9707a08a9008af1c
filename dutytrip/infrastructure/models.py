"""
SQLAlchemy ORM models  (maps to PostgreSQL).

Tables
------
* ``accounts``  -- drivers and admins with hashed shared secrets
* ``trips``     -- duty trips keyed by their one-time code

Indexes
-------
* **B-Tree** on ``trips.state`` and ``(driver_id, state)`` for the claim
  guard and active-duty recovery look-ups.
* ``driver_id`` is intentionally not a foreign key: a trip may outlive
  the account that claimed it.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Index,
    Integer,
    String,
    func,
)

from .database import Base
from dutytrip.domain.entities import Account, Trip
from dutytrip.domain.enums import Role, ServiceTier, TripState


def _values(enum_cls):
    return [member.value for member in enum_cls]


class AccountModel(Base):
    __tablename__ = "accounts"

    username = Column(String(64), primary_key=True)
    password_hash = Column(String(256), nullable=False)
    role = Column(
        Enum(Role, name="role", values_callable=_values),
        default=Role.DRIVER,
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_accounts_role", "role"),)

    def to_entity(self) -> Account:
        return Account(
            username=self.username,
            role=Role(self.role),
            password_hash=self.password_hash,
        )


class TripModel(Base):
    __tablename__ = "trips"

    code = Column(String(16), primary_key=True)
    service_tier = Column(
        Enum(ServiceTier, name="servicetier", values_callable=_values),
        nullable=False,
    )
    state = Column(
        Enum(TripState, name="tripstate", values_callable=_values),
        default=TripState.PENDING,
        nullable=False,
    )
    driver_id = Column(String(64), nullable=True)

    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    billed_amount = Column(Integer, nullable=True)
    night_surcharge = Column(Integer, nullable=True)

    issued_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "ended_at IS NULL OR ended_at >= started_at",
            name="ck_trips_end_after_start",
        ),
        Index("idx_trips_state", "state"),
        Index("idx_trips_driver_state", "driver_id", "state"),
    )

    def to_entity(self) -> Trip:
        return Trip(
            code=self.code,
            service_tier=ServiceTier(self.service_tier),
            state=TripState(self.state),
            driver_id=self.driver_id,
            started_at=self.started_at,
            ended_at=self.ended_at,
            billed_amount=self.billed_amount,
            night_surcharge=self.night_surcharge,
        )
