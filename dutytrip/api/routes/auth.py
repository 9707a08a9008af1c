"""
Authentication endpoints
========================

POST /api/v1/auth/login  -- exchange credentials for a bearer token
POST /api/v1/auth/logout -- revoke the current token
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials

from dutytrip.api.dependencies import bearer, get_account_service, get_session_store
from dutytrip.api.middleware import limiter
from dutytrip.api.schemas import LoginRequest, TokenResponse
from dutytrip.domain.errors import AuthenticationError
from dutytrip.infrastructure.sessions import SessionStore
from dutytrip.services.accounts import AccountService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse, summary="Log in")
@limiter.limit("20/minute")
async def login(
    request: Request,
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
    store: SessionStore = Depends(get_session_store),
):
    try:
        principal = await accounts.authenticate(body.username, body.password, body.role)
    except AuthenticationError:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = await store.create(principal)
    return TokenResponse(
        access_token=token, username=principal.username, role=principal.role
    )


@router.post("/logout", status_code=204, summary="Log out")
async def logout(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    store: SessionStore = Depends(get_session_store),
):
    if credentials is not None:
        await store.revoke(credentials.credentials)
