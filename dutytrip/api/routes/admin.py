"""
Admin endpoints
===============

POST   /api/v1/admin/trips                  -- issue a pending trip
GET    /api/v1/admin/trips                  -- list trips, newest duty first
GET    /api/v1/admin/trips/{code}           -- trip detail
DELETE /api/v1/admin/trips/{code}           -- remove a trip
POST   /api/v1/admin/trips/{code}/complete  -- manually end a duty
POST   /api/v1/admin/drivers                -- register a driver
GET    /api/v1/admin/drivers                -- list drivers
DELETE /api/v1/admin/drivers/{username}     -- remove a driver
POST   /api/v1/admin/settlements/preview    -- non-mutating fare preview
GET    /api/v1/admin/health                 -- simple health check
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from dutytrip.api.dependencies import (
    get_account_service,
    get_lifecycle,
    require_admin,
)
from dutytrip.api.middleware import limiter
from dutytrip.api.schemas import (
    AccountResponse,
    DriverCreateRequest,
    HealthResponse,
    SettlementPreviewRequest,
    SettlementResponse,
    TripIssueRequest,
    TripResponse,
)
from dutytrip.domain.enums import Role
from dutytrip.services.accounts import AccountService
from dutytrip.services.lifecycle import TripLifecycleManager

router = APIRouter(prefix="/admin", tags=["admin"])


# ── Trips ─────────────────────────────────────────────────────────────


@router.post(
    "/trips",
    status_code=201,
    response_model=TripResponse,
    summary="Issue a trip code",
    dependencies=[Depends(require_admin)],
)
@limiter.limit("100/minute")
async def issue_trip(
    request: Request,
    body: TripIssueRequest,
    lifecycle: TripLifecycleManager = Depends(get_lifecycle),
):
    return await lifecycle.issue(
        body.service_tier, code=body.code, driver_id=body.driver_id
    )


@router.get(
    "/trips",
    response_model=list[TripResponse],
    summary="List all trips",
    dependencies=[Depends(require_admin)],
)
async def list_trips(lifecycle: TripLifecycleManager = Depends(get_lifecycle)):
    return await lifecycle.list_trips()


@router.get(
    "/trips/{code}",
    response_model=TripResponse,
    summary="Trip detail",
    dependencies=[Depends(require_admin)],
)
async def get_trip(code: str, lifecycle: TripLifecycleManager = Depends(get_lifecycle)):
    trip = await lifecycle.get(code)
    if trip is None:
        raise HTTPException(status_code=404, detail="Trip not found")
    return trip


@router.delete(
    "/trips/{code}",
    status_code=204,
    summary="Remove a trip",
    dependencies=[Depends(require_admin)],
)
async def delete_trip(code: str, lifecycle: TripLifecycleManager = Depends(get_lifecycle)):
    if not await lifecycle.remove(code):
        raise HTTPException(status_code=404, detail="Trip not found")


@router.post(
    "/trips/{code}/complete",
    response_model=TripResponse,
    summary="Manually end a duty",
    responses={409: {"description": "Trip is not active"}},
    dependencies=[Depends(require_admin)],
)
async def complete_trip(
    code: str, lifecycle: TripLifecycleManager = Depends(get_lifecycle)
):
    return await lifecycle.complete(code)


@router.post(
    "/settlements/preview",
    response_model=SettlementResponse,
    summary="Preview a settlement without touching any trip",
    dependencies=[Depends(require_admin)],
)
async def preview_settlement(
    body: SettlementPreviewRequest,
    lifecycle: TripLifecycleManager = Depends(get_lifecycle),
):
    settlement = lifecycle.preview_settlement(
        body.service_tier, body.started_at, body.ended_at
    )
    return SettlementResponse.from_settlement(settlement)


# ── Drivers ───────────────────────────────────────────────────────────


@router.post(
    "/drivers",
    status_code=201,
    response_model=AccountResponse,
    summary="Register a driver",
    dependencies=[Depends(require_admin)],
)
async def create_driver(
    body: DriverCreateRequest,
    accounts: AccountService = Depends(get_account_service),
):
    return await accounts.register(body.username, body.password, Role.DRIVER)


@router.get(
    "/drivers",
    response_model=list[AccountResponse],
    summary="List drivers",
    dependencies=[Depends(require_admin)],
)
async def list_drivers(accounts: AccountService = Depends(get_account_service)):
    return await accounts.list_drivers()


@router.delete(
    "/drivers/{username}",
    status_code=204,
    summary="Remove a driver",
    dependencies=[Depends(require_admin)],
)
async def delete_driver(
    username: str, accounts: AccountService = Depends(get_account_service)
):
    if not await accounts.remove_driver(username):
        raise HTTPException(status_code=404, detail="Driver not found")


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
