"""
Trip lifecycle service: load -> guarded transition -> save.

The transition rules themselves live on ``Trip`` (see
``src.domain.enums.TRIP_TRANSITIONS``).  Trips are loaded with
``for_update=True`` so two requests racing on the same id are serialised
by the repository's row lock.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from src.domain.entities import Trip, utcnow
from src.domain.enums import TripOperation
from src.domain.errors import InvalidTransition, NotFound
from src.domain.ports import EventSink, Page, TripRepository


class TripLifecycleService:
    def __init__(
        self,
        repository: TripRepository,
        events: EventSink,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository
        self.events = events
        self.clock = clock

    async def accept(self, trip_id: int) -> Trip:
        return await self._transition(trip_id, TripOperation.ACCEPT)

    async def start(self, trip_id: int) -> Trip:
        return await self._transition(trip_id, TripOperation.START)

    async def complete(self, trip_id: int) -> Trip:
        return await self._transition(trip_id, TripOperation.COMPLETE)

    async def cancel(self, trip_id: int) -> Trip:
        return await self._transition(trip_id, TripOperation.CANCEL)

    # ── Read-only ─────────────────────────────────────────────────────

    async def get(self, trip_id: int) -> Trip:
        trip = await self.repository.find_by_id(trip_id)
        if trip is None:
            raise NotFound(trip_id)
        return trip

    async def list(self, page: int, size: int) -> Page[Trip]:
        return await self.repository.find_all(page, size)

    # ── Internals ─────────────────────────────────────────────────────

    async def _transition(self, trip_id: int, operation: TripOperation) -> Trip:
        trip = await self.repository.find_by_id(trip_id, for_update=True)
        if trip is None:
            self.events.warning("trip.not_found", trip_id=trip_id, operation=operation.value)
            raise NotFound(trip_id)

        for problem in trip.integrity_warnings():
            self.events.warning("trip.integrity_warning", trip_id=trip_id, detail=problem)

        previous = trip.status
        try:
            trip.apply(operation, now=self.clock())
        except InvalidTransition:
            self.events.warning(
                "trip.transition_rejected",
                trip_id=trip_id,
                operation=operation.value,
                status=previous.value,
            )
            raise

        saved = await self.repository.save(trip)
        self.events.info(
            "trip.transitioned",
            trip_id=trip_id,
            operation=operation.value,
            from_status=previous.value,
            to_status=saved.status.value,
        )
        return saved
