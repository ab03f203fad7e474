"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, Field, PlainSerializer

from src.domain.entities import Trip, TripFeatures
from src.domain.enums import TripStatus, VehicleType
from src.domain.ports import Page

# Prices travel as JSON numbers but stay Decimal in Python.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# ── Requests ──────────────────────────────────────────────────────────


class TripRequest(BaseModel):
    distance_km: float = Field(..., gt=0, le=500, description="Trip distance in km.")
    duration_min: float = Field(..., gt=0, le=600, description="Trip duration in minutes.")
    vehicle_type: Optional[VehicleType] = None
    passenger_count: Optional[int] = Field(None, ge=1, le=8)
    demand_index: Optional[float] = Field(None, ge=0)
    hour_of_day: Optional[int] = Field(None, ge=0, le=23)
    origin_zone: Optional[str] = Field(None, max_length=120)
    destination_zone: Optional[str] = Field(None, max_length=120)
    start_time: Optional[datetime] = None

    def to_features(self) -> TripFeatures:
        return TripFeatures(**self.model_dump())


# ── Responses ─────────────────────────────────────────────────────────


class TripResponse(BaseModel):
    id: int
    distance_km: float
    duration_min: float
    estimated_price: Money
    origin_zone: Optional[str] = None
    destination_zone: Optional[str] = None
    vehicle_type: Optional[VehicleType] = None
    status: TripStatus
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, trip: Trip) -> TripResponse:
        return cls(
            id=trip.id,
            distance_km=trip.distance_km,
            duration_min=trip.duration_min,
            estimated_price=trip.estimated_price.amount,
            origin_zone=trip.origin_zone,
            destination_zone=trip.destination_zone,
            vehicle_type=trip.vehicle_type,
            status=trip.status,
            start_time=trip.start_time,
            end_time=trip.end_time,
            created_at=trip.created_at,
        )


class TripPageResponse(BaseModel):
    items: list[TripResponse] = []
    page: int
    size: int
    total: int
    total_pages: int

    @classmethod
    def from_domain(cls, page: Page[Trip]) -> TripPageResponse:
        return cls(
            items=[TripResponse.from_domain(t) for t in page.items],
            page=page.page,
            size=page.size,
            total=page.total,
            total_pages=page.total_pages,
        )


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    code: str
    message: str
