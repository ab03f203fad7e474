"""
Error taxonomy for the trip pricing core.

Every error carries a stable ``code`` so the REST layer can map it to a
status code and a client-facing body without inspecting messages.

* ``InvalidInput``        -- caller supplied malformed / out-of-domain values
* ``ServiceUnavailable``  -- the ML predictor produced no usable price
* ``PersistenceFailure``  -- the repository could not store the trip
* ``NotFound``            -- unknown trip identifier
* ``InvalidTransition``   -- lifecycle operation illegal from current status
* ``InvalidPrediction``   -- a predicted price failed validation (internal,
  always surfaced to callers as ``ServiceUnavailable``)
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .enums import TripOperation, TripStatus


class ErrorCode(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_PREDICTION = "INVALID_PREDICTION"
    PREDICTION_SERVICE_UNAVAILABLE = "PREDICTION_SERVICE_UNAVAILABLE"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"
    TRIP_NOT_FOUND = "TRIP_NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"


class TripServiceError(Exception):
    """Base class for every error raised by the core."""

    code: ErrorCode

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInput(TripServiceError):
    code = ErrorCode.INVALID_INPUT


class InvalidPrediction(TripServiceError):
    code = ErrorCode.INVALID_PREDICTION


class ServiceUnavailable(TripServiceError):
    """Safe for the caller to retry; the core never retries itself."""

    code = ErrorCode.PREDICTION_SERVICE_UNAVAILABLE


class PersistenceFailure(TripServiceError):
    code = ErrorCode.PERSISTENCE_FAILURE


class NotFound(TripServiceError):
    code = ErrorCode.TRIP_NOT_FOUND

    def __init__(self, trip_id: int):
        self.trip_id = trip_id
        super().__init__(f"Trip not found with id: {trip_id}")


class InvalidTransition(TripServiceError):
    code = ErrorCode.INVALID_TRANSITION

    def __init__(self, operation: TripOperation, current_status: TripStatus):
        self.operation = operation
        self.current_status = current_status
        super().__init__(
            f"Cannot {operation.value} trip in status {current_status.value}"
        )
