"""
Unit tests for the prediction orchestrator.

Covers input validation order, predictor error translation, price
validation and persistence failure handling against in-memory fakes.
"""

from __future__ import annotations

import math
from decimal import Decimal

import pytest

from src.domain.entities import TripFeatures
from src.domain.enums import TripStatus, VehicleType
from src.domain.errors import (
    InvalidInput,
    InvalidPrediction,
    PersistenceFailure,
    ServiceUnavailable,
)
from src.services.prediction import PredictionOrchestrator


@pytest.fixture
def orchestrator(predictor, repository, events) -> PredictionOrchestrator:
    return PredictionOrchestrator(predictor, repository, events)


class _NullIdRepository:
    async def save(self, trip):
        return trip


class _NoneRepository:
    async def save(self, trip):
        return None


class _BrokenRepository:
    async def save(self, trip):
        raise RuntimeError("connection reset")


# ── Happy path ────────────────────────────────────────────────────────


class TestPredictAndPersist:
    @pytest.mark.asyncio
    async def test_persists_pending_trip_with_predicted_price(
        self, orchestrator, predictor, repository
    ):
        trip = await orchestrator.predict_and_persist(TripFeatures(10, 15))

        assert trip.id is not None
        assert trip.estimated_price.amount == Decimal("25.00")
        assert trip.status == TripStatus.PENDING
        assert trip.distance_km == 10.0
        assert trip.duration_min == 15.0
        assert trip.end_time is None
        assert trip.created_at is not None
        assert len(predictor.calls) == 1
        assert len(repository.saved) == 1

    @pytest.mark.asyncio
    async def test_optional_features_flow_into_trip(self, orchestrator, predictor):
        features = TripFeatures(
            distance_km=8.2,
            duration_min=17,
            vehicle_type=VehicleType.VAN,
            passenger_count=5,
            demand_index=0.7,
            hour_of_day=22,
            origin_zone="Sol",
            destination_zone="Chamartín",
        )
        trip = await orchestrator.predict_and_persist(features)

        assert trip.vehicle_type == VehicleType.VAN
        assert trip.origin_zone == "Sol"
        assert trip.destination_zone == "Chamartín"
        assert predictor.calls == [features]

    @pytest.mark.asyncio
    async def test_persisted_trip_round_trips_through_repository(
        self, orchestrator, repository
    ):
        trip = await orchestrator.predict_and_persist(TripFeatures(10, 15))
        assert await repository.find_by_id(trip.id) == trip

    @pytest.mark.asyncio
    async def test_float_price_from_predictor_is_accepted(self, repository, events):
        orchestrator = PredictionOrchestrator(
            _StaticPredictor(31.5), repository, events
        )
        trip = await orchestrator.predict_and_persist(TripFeatures(12, 20))
        assert trip.estimated_price.amount == Decimal("31.5")

    @pytest.mark.asyncio
    async def test_success_emits_info_events(self, orchestrator, events):
        await orchestrator.predict_and_persist(TripFeatures(10, 15))
        assert events.names("info") == [
            "prediction.requested",
            "prediction.received",
            "prediction.completed",
            "trip.persisted",
        ]
        assert events.names("warning") == []


class _StaticPredictor:
    def __init__(self, price):
        self.price = price

    async def predict(self, features):
        return self.price


# ── Input validation ──────────────────────────────────────────────────


class TestInputValidation:
    @pytest.mark.asyncio
    async def test_null_features(self, orchestrator, predictor):
        with pytest.raises(InvalidInput, match="null"):
            await orchestrator.predict_and_persist(None)
        assert predictor.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "distance, duration",
        [(math.nan, 15), (10, math.nan), (math.inf, 15), (10, -math.inf)],
    )
    async def test_non_finite_values(self, orchestrator, predictor, distance, duration):
        with pytest.raises(InvalidInput):
            await orchestrator.predict_and_persist(TripFeatures(distance, duration))
        assert predictor.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "distance, duration", [(0, 15), (-2.5, 15), (10, 0), (10, -1)]
    )
    async def test_non_positive_values(self, orchestrator, predictor, repository, distance, duration):
        with pytest.raises(InvalidInput, match="greater than zero"):
            await orchestrator.predict_and_persist(TripFeatures(distance, duration))
        assert predictor.calls == []
        assert repository.saved == []

    @pytest.mark.asyncio
    async def test_non_numeric_values(self, orchestrator, predictor):
        with pytest.raises(InvalidInput, match="numbers"):
            await orchestrator.predict_and_persist(TripFeatures("10", 15))  # type: ignore[arg-type]
        assert predictor.calls == []

    @pytest.mark.asyncio
    async def test_decimal_values_are_accepted(self, orchestrator, predictor):
        trip = await orchestrator.predict_and_persist(
            TripFeatures(Decimal("10"), Decimal("15.5"))
        )
        assert trip.distance_km == 10.0
        assert trip.duration_min == 15.5
        assert predictor.calls[0].distance_km == 10.0

    @pytest.mark.asyncio
    async def test_integer_too_large_for_float_is_rejected(self, orchestrator, predictor):
        with pytest.raises(InvalidInput, match="finite"):
            await orchestrator.predict_and_persist(TripFeatures(10**400, 15))
        assert predictor.calls == []

    @pytest.mark.asyncio
    async def test_bool_is_not_a_number(self, orchestrator):
        with pytest.raises(InvalidInput, match="numbers"):
            await orchestrator.predict_and_persist(TripFeatures(True, 15))

    @pytest.mark.asyncio
    async def test_nan_reported_before_non_positive(self, orchestrator):
        with pytest.raises(InvalidInput, match="NaN"):
            await orchestrator.predict_and_persist(TripFeatures(math.nan, -1))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"passenger_count": 0}, "passenger_count"),
            ({"demand_index": -0.1}, "demand_index"),
            ({"demand_index": math.nan}, "demand_index"),
            ({"hour_of_day": 24}, "hour_of_day"),
            ({"vehicle_type": "LIMO"}, "vehicle_type"),
        ],
    )
    async def test_out_of_range_optional_features(self, orchestrator, predictor, overrides, field):
        with pytest.raises(InvalidInput, match=field):
            await orchestrator.predict_and_persist(TripFeatures(10, 15, **overrides))
        assert predictor.calls == []

    @pytest.mark.asyncio
    async def test_required_fields_checked_before_optional_ones(self, orchestrator):
        with pytest.raises(InvalidInput, match="distance_km"):
            await orchestrator.predict_and_persist(TripFeatures(-1, 15, hour_of_day=99))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "features, warning",
        [
            (TripFeatures(1200, 900), "input.distance_unusually_high"),
            (TripFeatures(20, 1500), "input.duration_unusually_high"),
            (TripFeatures(100, 10), "input.average_speed_suspicious"),  # 600 km/h
            (TripFeatures(0.5, 60), "input.average_speed_suspicious"),  # 0.5 km/h
        ],
    )
    async def test_suspicious_values_warn_but_proceed(
        self, orchestrator, events, features, warning
    ):
        trip = await orchestrator.predict_and_persist(features)
        assert trip.id is not None
        assert warning in events.names("warning")


# ── Predictor failures ────────────────────────────────────────────────


class TestPredictorFailures:
    @pytest.mark.asyncio
    async def test_service_unavailable_propagates_unchanged(self, predictor, repository, events):
        original = ServiceUnavailable("ML service timeout or connection error")
        predictor.error = original
        orchestrator = PredictionOrchestrator(predictor, repository, events)

        with pytest.raises(ServiceUnavailable) as info:
            await orchestrator.predict_and_persist(TripFeatures(10, 15))

        assert info.value is original
        assert repository.saved == []

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(self, predictor, repository, events):
        predictor.error = KeyError("estimated_price")
        orchestrator = PredictionOrchestrator(predictor, repository, events)

        with pytest.raises(ServiceUnavailable, match="unexpected prediction error") as info:
            await orchestrator.predict_and_persist(TripFeatures(10, 15))

        assert isinstance(info.value.__cause__, KeyError)
        assert "prediction.failed" in events.names("error")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("price", [Decimal("-5.00"), None, Decimal("12.345"), "abc"])
    async def test_unusable_price_is_service_unavailable(
        self, predictor, repository, events, price
    ):
        predictor.price = price
        orchestrator = PredictionOrchestrator(predictor, repository, events)

        with pytest.raises(ServiceUnavailable, match="invalid prediction result") as info:
            await orchestrator.predict_and_persist(TripFeatures(10, 15))

        assert isinstance(info.value.__cause__, InvalidPrediction)
        assert repository.saved == []

    @pytest.mark.asyncio
    async def test_high_price_is_persisted_with_warning(self, predictor, repository, events):
        predictor.price = Decimal("12500.00")
        orchestrator = PredictionOrchestrator(
            predictor, repository, events, high_price_threshold=Decimal("10000")
        )

        trip = await orchestrator.predict_and_persist(TripFeatures(10, 15))

        assert trip.estimated_price.amount == Decimal("12500.00")
        assert "prediction.price_unusually_high" in events.names("warning")


# ── Persistence failures ──────────────────────────────────────────────


class TestPersistenceFailures:
    @pytest.mark.asyncio
    async def test_saved_trip_without_id(self, predictor, events):
        orchestrator = PredictionOrchestrator(predictor, _NullIdRepository(), events)
        with pytest.raises(PersistenceFailure, match="identifier"):
            await orchestrator.predict_and_persist(TripFeatures(10, 15))

    @pytest.mark.asyncio
    async def test_repository_returns_none(self, predictor, events):
        orchestrator = PredictionOrchestrator(predictor, _NoneRepository(), events)
        with pytest.raises(PersistenceFailure):
            await orchestrator.predict_and_persist(TripFeatures(10, 15))

    @pytest.mark.asyncio
    async def test_repository_exception_is_wrapped(self, predictor, events):
        orchestrator = PredictionOrchestrator(predictor, _BrokenRepository(), events)
        with pytest.raises(PersistenceFailure) as info:
            await orchestrator.predict_and_persist(TripFeatures(10, 15))
        assert isinstance(info.value.__cause__, RuntimeError)
        assert "persistence.failed" in events.names("error")
