"""
Seed script -- populates the database with sample trips for reviewers.

Prices are fixed here, so the ML service does not need to be running:
    python seed.py

Creates 8 trips across Madrid zones covering every lifecycle status
(PENDING, ACCEPTED, IN_PROGRESS, COMPLETED, CANCELLED).  Transitions go
through ``Trip.apply`` so the seeded rows respect the state machine.
"""

import asyncio
from datetime import timedelta

from src.domain.entities import Trip, utcnow
from src.domain.enums import TripOperation, TripStatus, VehicleType
from src.domain.pricing import PriceValue
from src.infrastructure.database import async_session_factory, create_tables, engine
from src.infrastructure.repositories import SqlAlchemyTripRepository

# Operations to replay from PENDING to reach each target status.
PATHS: dict[TripStatus, list[TripOperation]] = {
    TripStatus.PENDING: [],
    TripStatus.ACCEPTED: [TripOperation.ACCEPT],
    TripStatus.IN_PROGRESS: [TripOperation.ACCEPT, TripOperation.START],
    TripStatus.COMPLETED: [
        TripOperation.ACCEPT,
        TripOperation.START,
        TripOperation.COMPLETE,
    ],
    TripStatus.CANCELLED: [TripOperation.CANCEL],
}

TRIPS = [
    {"distance_km": 12.5, "duration_min": 20, "price": "18.40", "origin": "Sol", "destination": "Chamartín", "vehicle": VehicleType.STANDARD, "status": TripStatus.PENDING},
    {"distance_km": 16.0, "duration_min": 25, "price": "32.00", "origin": "Barajas T4", "destination": "Salamanca", "vehicle": VehicleType.PREMIUM, "status": TripStatus.PENDING},
    {"distance_km": 4.2, "duration_min": 12, "price": "8.75", "origin": "Lavapiés", "destination": "Retiro", "vehicle": VehicleType.STANDARD, "status": TripStatus.ACCEPTED},
    {"distance_km": 22.8, "duration_min": 35, "price": "41.10", "origin": "Barajas T1", "destination": "Moncloa", "vehicle": VehicleType.VAN, "status": TripStatus.IN_PROGRESS},
    {"distance_km": 7.9, "duration_min": 18, "price": "13.20", "origin": "Chueca", "destination": "Atocha", "vehicle": VehicleType.STANDARD, "status": TripStatus.COMPLETED},
    {"distance_km": 31.4, "duration_min": 40, "price": "55.90", "origin": "Getafe", "destination": "Barajas T4", "vehicle": VehicleType.PREMIUM, "status": TripStatus.COMPLETED},
    {"distance_km": 3.1, "duration_min": 9, "price": "6.50", "origin": "Malasaña", "destination": "Sol", "vehicle": VehicleType.STANDARD, "status": TripStatus.CANCELLED},
    {"distance_km": 18.6, "duration_min": 28, "price": "29.95", "origin": "Pozuelo", "destination": "Castellana", "vehicle": VehicleType.VAN, "status": TripStatus.CANCELLED},
]


async def seed() -> None:
    await create_tables()

    async with async_session_factory() as session:
        repo = SqlAlchemyTripRepository(session)
        now = utcnow()

        for i, data in enumerate(TRIPS):
            start = now - timedelta(hours=len(TRIPS) - i)
            trip = Trip(
                distance_km=data["distance_km"],
                duration_min=data["duration_min"],
                estimated_price=PriceValue.from_raw(data["price"]),
                origin_zone=data["origin"],
                destination_zone=data["destination"],
                vehicle_type=data["vehicle"],
                start_time=start,
            )
            for operation in PATHS[data["status"]]:
                trip.apply(
                    operation, now=start + timedelta(minutes=data["duration_min"])
                )
            saved = await repo.save(trip)
            print(f"  trip #{saved.id}: {saved.origin_zone} -> {saved.destination_zone} [{saved.status.value}]")

        await session.commit()

    print(f"\nSeeded {len(TRIPS)} trips.")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
