"""
SQLAlchemy ORM models.

Tables
------
* ``trips`` -- one row per trip, id assigned on first insert

Indexes
-------
* **B-Tree** on ``status`` and ``created_at`` for the lifecycle queries and
  the newest-first listing.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    Index,
    Integer,
    Numeric,
    String,
)

from .database import Base
from src.domain.enums import TripStatus, VehicleType


class TripModel(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, autoincrement=True)
    distance_km = Column(Float, nullable=False)
    duration_min = Column(Float, nullable=False)
    estimated_price = Column(Numeric(10, 2, asdecimal=True), nullable=False)

    origin_zone = Column(String(120), nullable=True)
    destination_zone = Column(String(120), nullable=True)
    vehicle_type = Column(Enum(VehicleType), nullable=True)
    status = Column(Enum(TripStatus), default=TripStatus.PENDING, nullable=False)

    start_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    # Written once on insert; the repository never updates it.
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint("estimated_price >= 0", name="ck_trips_price_non_negative"),
        Index("idx_trips_status", "status"),
        Index("idx_trips_created_at", "created_at"),
    )
