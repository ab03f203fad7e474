"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Trip``: every lifecycle change goes through
  ``Trip.apply`` which consults ``TRIP_TRANSITIONS``
  (PENDING -> ACCEPTED -> IN_PROGRESS -> COMPLETED, or CANCELLED from any
  non-terminal status).
- ``TripFeatures`` is the prediction input: two required measurements and
  an explicit set of optional ML features (``None`` means absent).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .enums import TRIP_TRANSITIONS, TripOperation, TripStatus, VehicleType
from .errors import InvalidTransition
from .pricing import PriceValue


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Value Object ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class TripFeatures:
    distance_km: float
    duration_min: float
    vehicle_type: Optional[VehicleType] = None
    passenger_count: Optional[int] = None
    demand_index: Optional[float] = None
    hour_of_day: Optional[int] = None
    origin_zone: Optional[str] = None
    destination_zone: Optional[str] = None
    start_time: Optional[datetime] = None

    def optional_features(self) -> dict[str, object]:
        """The optional ML features that are present, keyed by name."""
        present = {
            "vehicle_type": self.vehicle_type.value if self.vehicle_type else None,
            "passenger_count": self.passenger_count,
            "demand_index": self.demand_index,
            "hour_of_day": self.hour_of_day,
            "origin_zone": self.origin_zone,
            "destination_zone": self.destination_zone,
        }
        return {k: v for k, v in present.items() if v is not None}


# ── Entity ────────────────────────────────────────────────────────────


@dataclass
class Trip:
    distance_km: float
    duration_min: float
    estimated_price: PriceValue
    id: Optional[int] = None
    origin_zone: Optional[str] = None
    destination_zone: Optional[str] = None
    vehicle_type: Optional[VehicleType] = None
    status: TripStatus = TripStatus.PENDING
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def apply(self, operation: TripOperation, now: Optional[datetime] = None) -> None:
        """Run *operation* if legal from the current status, else raise.

        The trip is left untouched when ``InvalidTransition`` is raised.
        """
        valid_from, target = TRIP_TRANSITIONS[operation]
        if self.status not in valid_from:
            raise InvalidTransition(operation, self.status)
        if operation is TripOperation.COMPLETE:
            self.end_time = now or utcnow()
        self.status = target

    def accept(self) -> None:
        self.apply(TripOperation.ACCEPT)

    def start(self) -> None:
        self.apply(TripOperation.START)

    def complete(self, now: Optional[datetime] = None) -> None:
        self.apply(TripOperation.COMPLETE, now)

    def cancel(self) -> None:
        self.apply(TripOperation.CANCEL)

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def integrity_warnings(self) -> list[str]:
        """Invariant violations tolerated at construction but worth flagging."""
        warnings = []
        if not self.distance_km > 0:
            warnings.append(f"distance_km should be positive, got {self.distance_km}")
        if not self.duration_min > 0:
            warnings.append(f"duration_min should be positive, got {self.duration_min}")
        if (self.end_time is not None) != (self.status is TripStatus.COMPLETED):
            warnings.append(
                f"end_time is {'set' if self.end_time else 'missing'} "
                f"for status {self.status.value}"
            )
        return warnings
