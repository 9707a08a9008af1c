"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.

State transitions are expressed as single guarded statements
(``UPDATE ... WHERE code = :code AND state = :expected RETURNING *``).
Exactly one row back means the transition happened; no row means the
guard failed.  No read-then-write is used for a transition.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import AccountModel, TripModel
from dutytrip.domain.enums import Role, ServiceTier, TripState
from dutytrip.domain.errors import DuplicateAccountError, DuplicateCodeError


class TripRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert_pending(
        self,
        code: str,
        service_tier: ServiceTier,
        driver_id: Optional[str] = None,
    ) -> TripModel:
        if await self.session.get(TripModel, code) is not None:
            raise DuplicateCodeError(code)

        trip = TripModel(
            code=code,
            service_tier=service_tier,
            state=TripState.PENDING,
            driver_id=driver_id,
        )
        try:
            # Savepoint: a lost race rolls back this insert only
            async with self.session.begin_nested():
                self.session.add(trip)
                await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateCodeError(code) from exc
        return trip

    async def claim_pending(
        self, code: str, driver_id: str, started_at: datetime
    ) -> Optional[TripModel]:
        """Atomically move a PENDING trip to ACTIVE.  ``None`` if no match."""
        result = await self.session.execute(
            update(TripModel)
            .where(TripModel.code == code, TripModel.state == TripState.PENDING)
            .values(
                state=TripState.ACTIVE,
                driver_id=driver_id,
                started_at=started_at,
            )
            .returning(TripModel)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def complete_active(
        self,
        code: str,
        ended_at: datetime,
        billed_amount: int,
        night_surcharge: int,
    ) -> Optional[TripModel]:
        """Atomically move an ACTIVE trip to COMPLETED.  ``None`` if no match."""
        result = await self.session.execute(
            update(TripModel)
            .where(TripModel.code == code, TripModel.state == TripState.ACTIVE)
            .values(
                state=TripState.COMPLETED,
                ended_at=ended_at,
                billed_amount=billed_amount,
                night_surcharge=night_surcharge,
            )
            .returning(TripModel)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_code(self, code: str) -> Optional[TripModel]:
        result = await self.session.execute(
            select(TripModel).where(TripModel.code == code)
        )
        return result.scalar_one_or_none()

    async def get_active_by_driver(self, driver_id: str) -> Optional[TripModel]:
        result = await self.session.execute(
            select(TripModel)
            .where(
                TripModel.state == TripState.ACTIVE,
                TripModel.driver_id == driver_id,
            )
            .order_by(TripModel.started_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def list_trips(self) -> list[TripModel]:
        """Un-started trips first, then most recently started."""
        result = await self.session.execute(
            select(TripModel).order_by(
                TripModel.started_at.desc().nulls_first(),
                TripModel.issued_at.desc(),
            )
        )
        return list(result.scalars().all())

    async def delete(self, code: str) -> bool:
        result = await self.session.execute(
            delete(TripModel).where(TripModel.code == code)
        )
        return result.rowcount > 0


class AccountRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self, username: str, password_hash: str, role: Role = Role.DRIVER
    ) -> AccountModel:
        if await self.get_by_username(username) is not None:
            raise DuplicateAccountError(username)
        account = AccountModel(
            username=username, password_hash=password_hash, role=role
        )
        self.session.add(account)
        await self.session.flush()
        return account

    async def get_by_username(self, username: str) -> Optional[AccountModel]:
        """Case-insensitive look-up."""
        result = await self.session.execute(
            select(AccountModel).where(
                func.lower(AccountModel.username) == username.lower()
            )
        )
        return result.scalar_one_or_none()

    async def list_by_role(self, role: Role) -> list[AccountModel]:
        result = await self.session.execute(
            select(AccountModel)
            .where(AccountModel.role == role)
            .order_by(AccountModel.username)
        )
        return list(result.scalars().all())

    async def delete(self, username: str, role: Role) -> bool:
        """Case-insensitive; only removes an account holding ``role``."""
        result = await self.session.execute(
            delete(AccountModel).where(
                func.lower(AccountModel.username) == username.lower(),
                AccountModel.role == role,
            )
        )
        return result.rowcount > 0
