"""
HTTP client for the ML pricing microservice.

Request  : ``POST <ml_service_url>`` with ``{"distance_km", "duration_min",
           ...optional features that are present}``
Response : ``{"estimated_price": <number>}``

Numbers are parsed as ``Decimal`` so the precision the model sent is the
precision the core validates.  Every transport or protocol problem is
reported as ``ServiceUnavailable``; the orchestrator treats them all alike.
"""

from __future__ import annotations

import json
import logging
import time
from decimal import Decimal
from typing import Any, Optional

import httpx

from src.config import settings
from src.domain.entities import TripFeatures
from src.domain.errors import ServiceUnavailable

logger = logging.getLogger(__name__)


def build_payload(features: TripFeatures) -> dict[str, Any]:
    return {
        "distance_km": features.distance_km,
        "duration_min": features.duration_min,
        **features.optional_features(),
    }


class HttpPredictor:
    def __init__(
        self,
        url: str = settings.ml_service_url,
        *,
        client: Optional[httpx.AsyncClient] = None,
        connect_timeout: float = settings.ml_connect_timeout_seconds,
        read_timeout: float = settings.ml_read_timeout_seconds,
    ):
        self.url = url
        self._client = client
        self._timeout = httpx.Timeout(read_timeout, connect=connect_timeout)

    async def predict(self, features: TripFeatures) -> Decimal:
        payload = build_payload(features)
        logger.debug("ML request -> url=%s payload=%s", self.url, payload)
        started = time.perf_counter()

        try:
            if self._client is not None:
                response = await self._client.post(
                    self.url, json=payload, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self.url, json=payload)
        except httpx.TimeoutException as exc:
            raise ServiceUnavailable("ML service timeout or connection error") from exc
        except httpx.TransportError as exc:
            raise ServiceUnavailable("ML service timeout or connection error") from exc
        except httpx.HTTPError as exc:
            raise ServiceUnavailable("Unexpected ML communication error") from exc

        if not response.is_success:
            raise ServiceUnavailable(
                f"ML service responded with HTTP error: {response.status_code}"
            )

        price = self._parse_price(response)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("ML prediction successful -> price=%s, time=%.0f ms", price, elapsed_ms)
        return price

    @staticmethod
    def _parse_price(response: httpx.Response) -> Decimal:
        try:
            body = response.json(parse_float=Decimal, parse_int=Decimal)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ServiceUnavailable("ML service returned null response") from exc

        if not isinstance(body, dict) or "estimated_price" not in body:
            raise ServiceUnavailable("ML service returned null response")

        price = body["estimated_price"]
        if not isinstance(price, Decimal) or not price.is_finite() or price < 0:
            raise ServiceUnavailable("ML service returned invalid price value")
        return price
