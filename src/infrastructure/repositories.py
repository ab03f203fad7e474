"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

``SqlAlchemyTripRepository`` receives an ``AsyncSession`` (unit-of-work),
maps between the ``Trip`` entity and ``TripModel`` rows, and only ever
flushes: committing is the caller's job (see ``src.api.dependencies``).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import TripModel
from src.domain.entities import Trip, utcnow
from src.domain.ports import Page
from src.domain.pricing import PriceValue

logger = logging.getLogger(__name__)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo; every timestamp the service writes is UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_domain(row: TripModel) -> Trip:
    return Trip(
        id=row.id,
        distance_km=row.distance_km,
        duration_min=row.duration_min,
        estimated_price=PriceValue.from_raw(row.estimated_price),
        origin_zone=row.origin_zone,
        destination_zone=row.destination_zone,
        vehicle_type=row.vehicle_type,
        status=row.status,
        start_time=_aware(row.start_time),
        end_time=_aware(row.end_time),
        created_at=_aware(row.created_at),
    )


def _copy_mutable_fields(trip: Trip, row: TripModel) -> None:
    row.distance_km = trip.distance_km
    row.duration_min = trip.duration_min
    row.estimated_price = trip.estimated_price.amount
    row.origin_zone = trip.origin_zone
    row.destination_zone = trip.destination_zone
    row.vehicle_type = trip.vehicle_type
    row.status = trip.status
    row.start_time = trip.start_time
    row.end_time = trip.end_time


class SqlAlchemyTripRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, trip: Trip) -> Trip:
        if trip.id is None:
            row = TripModel(created_at=trip.created_at or utcnow())
            self.session.add(row)
        else:
            row = await self.session.get(TripModel, trip.id)
            if row is None:
                raise LookupError(f"Trip {trip.id} does not exist")
        _copy_mutable_fields(trip, row)
        await self.session.flush()
        logger.debug("Trip %s flushed (status=%s)", row.id, row.status)
        return to_domain(row)

    async def find_by_id(
        self, trip_id: int, *, for_update: bool = False
    ) -> Optional[Trip]:
        query = select(TripModel).where(TripModel.id == trip_id)
        if for_update:
            # SELECT ... FOR UPDATE serialises concurrent transitions
            query = query.with_for_update()
        result = await self.session.execute(query)
        row = result.scalar_one_or_none()
        return to_domain(row) if row is not None else None

    async def find_all(self, page: int, size: int) -> Page[Trip]:
        total = (
            await self.session.execute(select(func.count()).select_from(TripModel))
        ).scalar() or 0
        result = await self.session.execute(
            select(TripModel)
            .order_by(TripModel.created_at.desc(), TripModel.id.desc())
            .offset(page * size)
            .limit(size)
        )
        items = [to_domain(row) for row in result.scalars().all()]
        return Page(items=items, page=page, size=size, total=total)
