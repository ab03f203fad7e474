"""
Trip endpoints
==============

GET   /api/v1/trips                   -- paginated listing (zero-based)
GET   /api/v1/trips/{trip_id}         -- single trip
PATCH /api/v1/trips/{trip_id}/accept   -- PENDING     -> ACCEPTED
PATCH /api/v1/trips/{trip_id}/start    -- ACCEPTED    -> IN_PROGRESS
PATCH /api/v1/trips/{trip_id}/complete -- IN_PROGRESS -> COMPLETED
PATCH /api/v1/trips/{trip_id}/cancel   -- any non-terminal -> CANCELLED
"""

from fastapi import APIRouter, Depends, Path, Query, Request

from src.api.dependencies import get_lifecycle_service
from src.api.middleware import limiter
from src.api.schemas import ErrorResponse, TripPageResponse, TripResponse
from src.config import settings
from src.services.lifecycle import TripLifecycleService

router = APIRouter(prefix="/trips", tags=["trips"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Unknown trip id."}}
_TRANSITION_ERRORS = {
    **_NOT_FOUND,
    409: {"model": ErrorResponse, "description": "Illegal from the current status."},
}


@router.get("", response_model=TripPageResponse, summary="List trips")
@limiter.limit(settings.rate_limit)
async def list_trips(
    request: Request,
    page: int = Query(0, ge=0),
    size: int = Query(20, ge=1, le=100),
    service: TripLifecycleService = Depends(get_lifecycle_service),
):
    return TripPageResponse.from_domain(await service.list(page, size))


@router.get(
    "/{trip_id}",
    response_model=TripResponse,
    summary="Get a trip",
    responses=_NOT_FOUND,
)
@limiter.limit(settings.rate_limit)
async def get_trip(
    request: Request,
    trip_id: int = Path(..., ge=1),
    service: TripLifecycleService = Depends(get_lifecycle_service),
):
    return TripResponse.from_domain(await service.get(trip_id))


@router.patch(
    "/{trip_id}/accept",
    response_model=TripResponse,
    summary="Accept a pending trip",
    responses=_TRANSITION_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def accept_trip(
    request: Request,
    trip_id: int = Path(..., ge=1),
    service: TripLifecycleService = Depends(get_lifecycle_service),
):
    return TripResponse.from_domain(await service.accept(trip_id))


@router.patch(
    "/{trip_id}/start",
    response_model=TripResponse,
    summary="Start an accepted trip",
    responses=_TRANSITION_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def start_trip(
    request: Request,
    trip_id: int = Path(..., ge=1),
    service: TripLifecycleService = Depends(get_lifecycle_service),
):
    return TripResponse.from_domain(await service.start(trip_id))


@router.patch(
    "/{trip_id}/complete",
    response_model=TripResponse,
    summary="Complete a trip in progress",
    description="Also stamps ``end_time`` with the completion time.",
    responses=_TRANSITION_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def complete_trip(
    request: Request,
    trip_id: int = Path(..., ge=1),
    service: TripLifecycleService = Depends(get_lifecycle_service),
):
    return TripResponse.from_domain(await service.complete(trip_id))


@router.patch(
    "/{trip_id}/cancel",
    response_model=TripResponse,
    summary="Cancel a trip",
    description="Allowed from PENDING, ACCEPTED or IN_PROGRESS only.",
    responses=_TRANSITION_ERRORS,
)
@limiter.limit(settings.rate_limit)
async def cancel_trip(
    request: Request,
    trip_id: int = Path(..., ge=1),
    service: TripLifecycleService = Depends(get_lifecycle_service),
):
    return TripResponse.from_domain(await service.cancel(trip_id))
