"""
Driver duty endpoints
=====================

POST /api/v1/duties/claim           -- start a duty with a one-time code
GET  /api/v1/duties/active          -- recover the running duty, if any
POST /api/v1/duties/{code}/complete -- end the duty and settle the fare
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from dutytrip.api.dependencies import get_lifecycle, require_driver
from dutytrip.api.middleware import limiter
from dutytrip.api.schemas import (
    ActiveDutyResponse,
    ClaimRequest,
    SettlementResponse,
    TripResponse,
)
from dutytrip.config import settings
from dutytrip.domain.clock import format_elapsed
from dutytrip.domain.entities import Principal
from dutytrip.domain.errors import NotActiveError
from dutytrip.services.accounts import may_complete
from dutytrip.services.lifecycle import TripLifecycleManager

router = APIRouter(prefix="/duties", tags=["duties"])


@router.post(
    "/claim",
    response_model=TripResponse,
    summary="Start a duty",
    responses={400: {"description": "Incorrect code"}},
)
@limiter.limit(settings.claim_rate_limit)
async def claim_duty(
    request: Request,
    body: ClaimRequest,
    principal: Principal = Depends(require_driver),
    lifecycle: TripLifecycleManager = Depends(get_lifecycle),
):
    return await lifecycle.claim(body.code, principal.username)


@router.get(
    "/active",
    response_model=Optional[ActiveDutyResponse],
    summary="Running duty for the signed-in driver",
    description=(
        "Read-only.  Returns ``null`` when the driver has no active duty. "
        "The elapsed timer and provisional fare are informational only."
    ),
)
async def active_duty(
    principal: Principal = Depends(require_driver),
    lifecycle: TripLifecycleManager = Depends(get_lifecycle),
):
    trip = await lifecycle.find_active_for_driver(principal.username)
    if trip is None:
        return None

    now = lifecycle.now()
    provisional = lifecycle.preview_settlement(
        trip.service_tier, trip.started_at, max(now, trip.started_at)
    )
    return ActiveDutyResponse(
        trip=TripResponse.model_validate(trip),
        elapsed=format_elapsed(trip.started_at, now),
        provisional=SettlementResponse.from_settlement(provisional),
    )


@router.post(
    "/{code}/complete",
    response_model=TripResponse,
    summary="End a duty",
    responses={409: {"description": "Trip is not active"}},
)
async def complete_duty(
    code: str,
    principal: Principal = Depends(require_driver),
    lifecycle: TripLifecycleManager = Depends(get_lifecycle),
):
    trip = await lifecycle.get(code)
    if trip is None or not may_complete(principal, trip):
        raise NotActiveError(code)
    return await lifecycle.complete(code)
