"""
Prediction Orchestrator
=======================

Turns a set of ``TripFeatures`` into a persisted ``PENDING`` trip.

Pipeline
--------
1. Validate the input (fail fast, first violation wins):
   features present -> finite numbers -> strictly positive -> optional
   features in range.  Extreme-but-plausible values are logged only.
2. Ask the ``Predictor`` for a price.
3. Validate the price (see ``src.domain.pricing``).
4. Build the trip and hand it to the ``TripRepository``.

Error translation
-----------------
* Anything the predictor raises that is not already ``ServiceUnavailable``
  becomes ``ServiceUnavailable("unexpected prediction error")``.
* A price that fails validation becomes
  ``ServiceUnavailable("invalid prediction result")`` so callers have a
  single "prediction unusable" failure mode.
* Anything the repository raises, or a saved trip without an id, becomes
  ``PersistenceFailure``.

No retries happen here; retry policy belongs to the adapters or callers.
"""

from __future__ import annotations

import math
from dataclasses import replace
from decimal import Decimal
from numbers import Real
from typing import NoReturn, Optional

from src.domain.entities import Trip, TripFeatures
from src.domain.enums import TripStatus, VehicleType
from src.domain.errors import (
    InvalidInput,
    InvalidPrediction,
    PersistenceFailure,
    ServiceUnavailable,
)
from src.domain.ports import EventSink, Predictor, TripRepository
from src.domain.pricing import DEFAULT_HIGH_PRICE_THRESHOLD, validate_predicted_price


def _as_float(value: object) -> Optional[float]:
    """``float(value)`` for real numbers and ``Decimal``; ``None`` otherwise.

    Integers too large for a float come back as ``inf``.
    """
    if isinstance(value, bool) or not isinstance(value, (Real, Decimal)):
        return None
    try:
        return float(value)
    except OverflowError:
        return math.inf
    except (TypeError, ValueError):
        return None


class PredictionOrchestrator:
    def __init__(
        self,
        predictor: Predictor,
        repository: TripRepository,
        events: EventSink,
        *,
        high_price_threshold: Decimal = DEFAULT_HIGH_PRICE_THRESHOLD,
        max_distance_km: float = 1000.0,
        max_duration_min: float = 1440.0,
        min_avg_speed_kmh: float = 1.0,
        max_avg_speed_kmh: float = 300.0,
    ):
        self.predictor = predictor
        self.repository = repository
        self.events = events
        self.high_price_threshold = high_price_threshold
        self.max_distance_km = max_distance_km
        self.max_duration_min = max_duration_min
        self.min_avg_speed_kmh = min_avg_speed_kmh
        self.max_avg_speed_kmh = max_avg_speed_kmh

    async def predict_and_persist(self, features: Optional[TripFeatures]) -> Trip:
        self.events.info("prediction.requested", features=features)

        features = self._validate_features(features)
        self._report_suspicious_values(features)

        # ── Prediction ────────────────────────────────────────────────
        try:
            raw_price = await self.predictor.predict(features)
        except ServiceUnavailable as exc:
            self.events.error("prediction.failed", exc=exc, reason="service_unavailable")
            raise
        except Exception as exc:
            self.events.error("prediction.failed", exc=exc, reason="unexpected")
            raise ServiceUnavailable("unexpected prediction error") from exc

        self.events.info("prediction.received", raw_price=raw_price)

        try:
            price = validate_predicted_price(
                raw_price, self.events, self.high_price_threshold
            )
        except InvalidPrediction as exc:
            self.events.error(
                "prediction.rejected", exc=exc, raw_price=raw_price, reason=exc.message
            )
            raise ServiceUnavailable("invalid prediction result") from exc

        self.events.info("prediction.completed", price=price)

        # ── Persistence ───────────────────────────────────────────────
        trip = Trip(
            distance_km=float(features.distance_km),
            duration_min=float(features.duration_min),
            estimated_price=price,
            origin_zone=features.origin_zone,
            destination_zone=features.destination_zone,
            vehicle_type=features.vehicle_type,
            status=TripStatus.PENDING,
            start_time=features.start_time,
        )

        try:
            saved = await self.repository.save(trip)
        except Exception as exc:
            self.events.error("persistence.failed", exc=exc)
            raise PersistenceFailure("Error saving the trip") from exc

        if saved is None or saved.id is None:
            self.events.error("persistence.failed", reason="no identifier assigned")
            raise PersistenceFailure("Repository returned a trip without an identifier")

        self.events.info("trip.persisted", trip_id=saved.id, price=saved.estimated_price)
        return saved

    # ── Validation ────────────────────────────────────────────────────

    def _validate_features(self, features: Optional[TripFeatures]) -> TripFeatures:
        if features is None:
            self._reject("TripFeatures must not be null")

        distance = _as_float(features.distance_km)
        duration = _as_float(features.duration_min)
        if distance is None or duration is None:
            self._reject("distance_km and duration_min must be numbers")
        if math.isnan(distance) or math.isnan(duration):
            self._reject("distance_km and duration_min must not be NaN")
        if math.isinf(distance) or math.isinf(duration):
            self._reject("distance_km and duration_min must be finite")
        if distance <= 0:
            self._reject(f"distance_km must be greater than zero, got {distance}")
        if duration <= 0:
            self._reject(f"duration_min must be greater than zero, got {duration}")

        self._validate_optional_features(features)
        return replace(features, distance_km=distance, duration_min=duration)

    def _validate_optional_features(self, features: TripFeatures) -> None:
        if features.vehicle_type is not None and not isinstance(
            features.vehicle_type, VehicleType
        ):
            self._reject(f"Unknown vehicle_type {features.vehicle_type!r}")
        count = features.passenger_count
        if count is not None and (
            not isinstance(count, int) or isinstance(count, bool) or count < 1
        ):
            self._reject(f"passenger_count must be at least 1, got {count!r}")
        demand = features.demand_index
        if demand is not None:
            value = _as_float(demand)
            if value is None or not math.isfinite(value) or value < 0:
                self._reject(
                    f"demand_index must be a finite non-negative number, got {demand!r}"
                )
        hour = features.hour_of_day
        if hour is not None and (
            not isinstance(hour, int) or isinstance(hour, bool) or not 0 <= hour <= 23
        ):
            self._reject(f"hour_of_day must be between 0 and 23, got {hour!r}")

    def _report_suspicious_values(self, features: TripFeatures) -> None:
        distance, duration = features.distance_km, features.duration_min
        if distance > self.max_distance_km:
            self.events.warning("input.distance_unusually_high", distance_km=distance)
        if duration > self.max_duration_min:
            self.events.warning("input.duration_unusually_high", duration_min=duration)
        avg_speed = distance / (duration / 60.0)
        if not self.min_avg_speed_kmh <= avg_speed <= self.max_avg_speed_kmh:
            self.events.warning(
                "input.average_speed_suspicious", avg_speed_kmh=round(avg_speed, 2)
            )

    def _reject(self, message: str) -> NoReturn:
        self.events.warning("input.rejected", reason=message)
        raise InvalidInput(message)
