"""
Ports consumed by the core.

The orchestrator and the lifecycle service depend only on these
protocols; concrete adapters live in ``src.infrastructure`` and
``src.observability``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Generic, Optional, Protocol, TypeVar

from .entities import Trip, TripFeatures

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One zero-based slice of a listing plus total-count metadata."""

    items: list[T] = field(default_factory=list)
    page: int = 0
    size: int = 20
    total: int = 0

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total / self.size)


class Predictor(Protocol):
    async def predict(self, features: TripFeatures) -> Decimal | float | int | str | None:
        """Return the estimated price, or raise ``ServiceUnavailable``."""


class TripRepository(Protocol):
    async def save(self, trip: Trip) -> Trip:
        """Insert or update *trip*; the returned copy carries the id."""

    async def find_by_id(
        self, trip_id: int, *, for_update: bool = False
    ) -> Optional[Trip]: ...

    async def find_all(self, page: int, size: int) -> Page[Trip]: ...


class EventSink(Protocol):
    """Structured observability side channel injected into the core."""

    def info(self, event: str, **fields: Any) -> None: ...

    def warning(self, event: str, **fields: Any) -> None: ...

    def error(self, event: str, *, exc: BaseException | None = None, **fields: Any) -> None: ...
