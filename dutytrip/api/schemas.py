"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from dutytrip.domain.enums import Role, ServiceTier, TripState
from dutytrip.domain.settlement import Settlement


# ── Requests ──────────────────────────────────────────────────────────


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)
    role: Role = Role.DRIVER


class ClaimRequest(BaseModel):
    code: str = Field("", max_length=16, description="One-time trip code.")


class TripIssueRequest(BaseModel):
    service_tier: ServiceTier = ServiceTier.CITY
    code: Optional[str] = Field(
        None,
        min_length=1,
        max_length=16,
        description="Leave empty to generate a random numeric code.",
    )
    driver_id: Optional[str] = Field(None, max_length=64)


class DriverCreateRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)


class SettlementPreviewRequest(BaseModel):
    service_tier: ServiceTier
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None


# ── Responses ─────────────────────────────────────────────────────────


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    username: str
    role: Role


class TripResponse(BaseModel):
    code: str
    service_tier: ServiceTier
    state: TripState
    driver_id: Optional[str] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    billed_amount: Optional[int] = None
    night_surcharge: Optional[int] = None

    model_config = {"from_attributes": True}


class SettlementResponse(BaseModel):
    billed_amount: int
    night_surcharge: int
    base_fare: int

    @classmethod
    def from_settlement(cls, settlement: Settlement) -> "SettlementResponse":
        return cls(
            billed_amount=settlement.billed_amount,
            night_surcharge=settlement.night_surcharge,
            base_fare=settlement.billed_amount - settlement.night_surcharge,
        )


class ActiveDutyResponse(BaseModel):
    trip: TripResponse
    elapsed: str = Field(..., description="Observational HH:MM:SS timer.")
    provisional: SettlementResponse


class TripReportResponse(BaseModel):
    code: str
    service_tier: ServiceTier
    driver_id: Optional[str] = None
    started_at: datetime
    ended_at: datetime
    duration: str
    base_fare: int
    night_surcharge: int
    billed_amount: int


class AccountResponse(BaseModel):
    username: str
    role: Role

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
