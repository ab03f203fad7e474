"""FastAPI dependency injection helpers."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain.ports import EventSink, Predictor, TripRepository
from src.infrastructure.database import async_session_factory
from src.infrastructure.ml_client import HttpPredictor
from src.infrastructure.repositories import SqlAlchemyTripRepository
from src.observability.events import LoggingEventSink
from src.services.lifecycle import TripLifecycleService
from src.services.prediction import PredictionOrchestrator


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_trip_repository(db: AsyncSession = Depends(get_db)) -> TripRepository:
    return SqlAlchemyTripRepository(db)


def get_predictor(request: Request) -> Predictor:
    """Reuse the app-wide client opened in the lifespan, when there is one."""
    client = getattr(request.app.state, "ml_client", None)
    return HttpPredictor(settings.ml_service_url, client=client)


def get_event_sink() -> EventSink:
    return LoggingEventSink()


def get_prediction_orchestrator(
    predictor: Predictor = Depends(get_predictor),
    repository: TripRepository = Depends(get_trip_repository),
    events: EventSink = Depends(get_event_sink),
) -> PredictionOrchestrator:
    return PredictionOrchestrator(
        predictor,
        repository,
        events,
        high_price_threshold=settings.high_price_threshold,
        max_distance_km=settings.max_distance_km,
        max_duration_min=settings.max_duration_min,
        min_avg_speed_kmh=settings.min_avg_speed_kmh,
        max_avg_speed_kmh=settings.max_avg_speed_kmh,
    )


def get_lifecycle_service(
    repository: TripRepository = Depends(get_trip_repository),
    events: EventSink = Depends(get_event_sink),
) -> TripLifecycleService:
    return TripLifecycleService(repository, events)
