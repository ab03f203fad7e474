"""Domain enumerations and state-transition rules."""

import enum


class TripStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TripOperation(str, enum.Enum):
    ACCEPT = "accept"
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"


# State machine: operation -> (statuses it is valid from, resulting status)
TRIP_TRANSITIONS: dict[TripOperation, tuple[frozenset[TripStatus], TripStatus]] = {
    TripOperation.ACCEPT: (frozenset({TripStatus.PENDING}), TripStatus.ACCEPTED),
    TripOperation.START: (frozenset({TripStatus.ACCEPTED}), TripStatus.IN_PROGRESS),
    TripOperation.COMPLETE: (
        frozenset({TripStatus.IN_PROGRESS}),
        TripStatus.COMPLETED,
    ),
    TripOperation.CANCEL: (
        frozenset({TripStatus.PENDING, TripStatus.ACCEPTED, TripStatus.IN_PROGRESS}),
        TripStatus.CANCELLED,
    ),
}

TERMINAL_STATUSES = frozenset({TripStatus.COMPLETED, TripStatus.CANCELLED})


class VehicleType(str, enum.Enum):
    STANDARD = "STANDARD"
    PREMIUM = "PREMIUM"
    VAN = "VAN"
