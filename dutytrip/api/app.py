"""
FastAPI application factory.

* Registers routes for auth, driver duties, admin and reports.
* Maps domain errors to HTTP responses.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from dutytrip.api.middleware import limiter
from dutytrip.api.routes import admin, auth, duties, reports
from dutytrip.config import settings
from dutytrip.domain.errors import (
    ClockSkewError,
    DuplicateAccountError,
    DuplicateCodeError,
    InvalidCodeError,
    NotActiveError,
)

logging.basicConfig(level=settings.log_level)

# Domain error -> HTTP status
ERROR_STATUS: dict[type[Exception], int] = {
    InvalidCodeError: 400,
    NotActiveError: 409,
    DuplicateCodeError: 409,
    DuplicateAccountError: 409,
    ClockSkewError: 422,
}


async def _domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=ERROR_STATUS[type(exc)], content={"detail": str(exc)}
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Duty Trip API",
        description=(
            "Issues one-time duty codes, tracks a driver's active duty and "
            "settles the fare under city (hourly, 4 h minimum, night "
            "surcharge) or outstation (12 h block) tariffs."
        ),
        version="1.0.0",
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    for exc_class in ERROR_STATUS:
        app.add_exception_handler(exc_class, _domain_error_handler)

    # Routers
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(duties.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")
    app.include_router(reports.router, prefix="/api/v1")

    return app
