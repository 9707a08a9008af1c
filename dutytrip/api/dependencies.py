"""FastAPI dependency injection helpers."""

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from dutytrip.config import settings
from dutytrip.domain.clock import Clock, system_clock, zone
from dutytrip.domain.entities import Principal
from dutytrip.domain.enums import Role
from dutytrip.domain.settlement import SettlementCalculator
from dutytrip.infrastructure.database import async_session_factory
from dutytrip.infrastructure.redis_client import get_redis
from dutytrip.infrastructure.repositories import AccountRepository, TripRepository
from dutytrip.infrastructure.sessions import SessionStore
from dutytrip.services.accounts import AccountService, has_role
from dutytrip.services.lifecycle import TripLifecycleManager

TZ = zone(settings.timezone)
calculator = SettlementCalculator.from_settings(settings, tz=TZ)
bearer = HTTPBearer(auto_error=False)


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_clock() -> Clock:
    return system_clock(TZ)


async def get_session_store() -> SessionStore:
    return SessionStore(await get_redis(), settings.session_ttl_seconds)


def get_lifecycle(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> TripLifecycleManager:
    return TripLifecycleManager(
        TripRepository(db),
        calculator,
        TZ,
        clock=clock,
        code_digits=settings.code_digits,
        code_attempts=settings.code_generation_attempts,
    )


def get_account_service(db: AsyncSession = Depends(get_db)) -> AccountService:
    return AccountService(AccountRepository(db))


async def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    store: SessionStore = Depends(get_session_store),
) -> Principal:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    principal = await store.resolve(credentials.credentials)
    if principal is None:
        raise HTTPException(status_code=401, detail="Session expired")
    return principal


def require_role(role: Role):
    async def _dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if not has_role(principal, role):
            raise HTTPException(status_code=403, detail="Forbidden")
        return principal

    return _dependency


require_driver = require_role(Role.DRIVER)
require_admin = require_role(Role.ADMIN)
