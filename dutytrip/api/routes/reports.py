"""
Shareable trip reports
======================

GET /api/v1/reports/{code} -- fare breakdown of a completed trip
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from dutytrip.api.dependencies import get_lifecycle
from dutytrip.api.middleware import limiter
from dutytrip.api.schemas import TripReportResponse
from dutytrip.domain.clock import format_elapsed
from dutytrip.domain.enums import TripState
from dutytrip.services.lifecycle import TripLifecycleManager

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/{code}", response_model=TripReportResponse, summary="Trip report")
@limiter.limit("100/minute")
async def trip_report(
    request: Request,
    code: str,
    lifecycle: TripLifecycleManager = Depends(get_lifecycle),
):
    trip = await lifecycle.get(code)
    if trip is None or trip.state is not TripState.COMPLETED:
        raise HTTPException(status_code=404, detail="Report not found")

    return TripReportResponse(
        code=trip.code,
        service_tier=trip.service_tier,
        driver_id=trip.driver_id,
        started_at=trip.started_at,
        ended_at=trip.ended_at,
        duration=format_elapsed(trip.started_at, trip.ended_at),
        base_fare=trip.base_fare,
        night_surcharge=trip.night_surcharge or 0,
        billed_amount=trip.billed_amount,
    )
