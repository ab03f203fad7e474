"""
FastAPI application factory.

* Registers routes for predictions, trips and health.
* Creates missing tables on startup (``CREATE_TABLES_ON_STARTUP``).
* Maps core errors to ``{"code", "message"}`` bodies.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import health, predictions, trips
from src.config import settings
from src.domain.errors import (
    InvalidInput,
    InvalidTransition,
    NotFound,
    PersistenceFailure,
    ServiceUnavailable,
    TripServiceError,
)
from src.infrastructure.database import create_tables

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[TripServiceError], int] = {
    InvalidInput: 400,
    NotFound: 404,
    InvalidTransition: 409,
    PersistenceFailure: 500,
    ServiceUnavailable: 503,
}

_REQUEST_LOCATIONS = {"path", "query", "body", "header", "cookie"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.create_tables_on_startup:
        await create_tables()
        logger.info("Database tables ensured")
    # One pooled client for every call to the ML service.
    app.state.ml_client = httpx.AsyncClient()
    try:
        yield
    finally:
        await app.state.ml_client.aclose()


async def trip_service_error_handler(request: Request, exc: TripServiceError):
    status = next(
        (code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)), 500
    )
    return JSONResponse(
        status_code=status,
        content={"code": exc.code.value, "message": exc.message},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    loc = list(first.get("loc", ()))
    if loc and loc[0] in _REQUEST_LOCATIONS:
        loc = loc[1:]
    field = ".".join(str(p) for p in loc)
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={
            "code": "VALIDATION_ERROR",
            "message": f"{field}: {message}" if field else message,
        },
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Taxi Trip Pricing API",
        description=(
            "Prices trips with an external ML model, stores them and tracks "
            "each trip through its lifecycle "
            "(PENDING -> ACCEPTED -> IN_PROGRESS -> COMPLETED, or CANCELLED)."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Error mapping
    app.add_exception_handler(TripServiceError, trip_service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Routers
    app.include_router(predictions.router, prefix="/api/v1")
    app.include_router(trips.router, prefix="/api/v1")
    app.include_router(health.router, prefix="/api/v1")

    return app
