"""
Prediction endpoint
===================

POST /api/v1/prediction -- price a trip with the ML service and persist it
"""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_prediction_orchestrator
from src.api.middleware import limiter
from src.api.schemas import ErrorResponse, TripRequest, TripResponse
from src.config import settings
from src.services.prediction import PredictionOrchestrator

router = APIRouter(prefix="/prediction", tags=["prediction"])


@router.post(
    "",
    status_code=201,
    response_model=TripResponse,
    summary="Predict a trip price and store the trip",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid trip features."},
        503: {"model": ErrorResponse, "description": "No usable prediction."},
    },
)
@limiter.limit(settings.rate_limit)
async def predict_trip_price(
    request: Request,
    body: TripRequest,
    orchestrator: PredictionOrchestrator = Depends(get_prediction_orchestrator),
):
    trip = await orchestrator.predict_and_persist(body.to_features())
    return TripResponse.from_domain(trip)
