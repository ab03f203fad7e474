"""
Price value object and the acceptance rules for predicted prices.

A ``PriceValue`` is a non-negative ``Decimal`` with at most two fractional
digits.  Upstream adapters hand over whatever the ML service returned
(``Decimal``, ``int``, ``float`` or a numeric string); ``from_raw`` is the
only way to turn that into a price.

No rounding or currency conversion happens here: a value that does not
already satisfy the rules is rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, TYPE_CHECKING

from .errors import InvalidPrediction

if TYPE_CHECKING:
    from .ports import EventSink

MAX_SCALE = 2
DEFAULT_HIGH_PRICE_THRESHOLD = Decimal("10000")


def _to_decimal(raw: Any) -> Decimal:
    if isinstance(raw, bool):
        raise InvalidPrediction(f"Price must be numeric, got {raw!r}")
    if isinstance(raw, Decimal):
        return raw
    if isinstance(raw, int):
        return Decimal(raw)
    if isinstance(raw, float):
        # repr() gives the shortest round-tripping form: 25.0 -> "25.0"
        return Decimal(repr(raw))
    if isinstance(raw, str):
        try:
            return Decimal(raw.strip())
        except InvalidOperation as exc:
            raise InvalidPrediction(f"Price must be numeric, got {raw!r}") from exc
    raise InvalidPrediction(f"Price must be numeric, got {type(raw).__name__}")


def scale_of(amount: Decimal) -> int:
    """Number of fractional digits as written (``Decimal("1.50")`` -> 2)."""
    exponent = amount.as_tuple().exponent
    return max(0, -exponent) if isinstance(exponent, int) else 0


@dataclass(frozen=True)
class PriceValue:
    amount: Decimal

    @classmethod
    def from_raw(cls, raw: Any) -> PriceValue:
        """Validate *raw* and wrap it, raising ``InvalidPrediction`` on failure."""
        if raw is None:
            raise InvalidPrediction("Price is missing")
        amount = _to_decimal(raw)
        if not amount.is_finite():
            raise InvalidPrediction(f"Price must be finite, got {amount}")
        if amount < 0:
            raise InvalidPrediction(f"Price must not be negative, got {amount}")
        if scale_of(amount) > MAX_SCALE:
            raise InvalidPrediction(
                f"Price has more than {MAX_SCALE} decimal digits: {amount}"
            )
        return cls(amount)

    def __str__(self) -> str:
        return str(self.amount)


def validate_predicted_price(
    raw: Any,
    events: EventSink,
    high_price_threshold: Decimal = DEFAULT_HIGH_PRICE_THRESHOLD,
) -> PriceValue:
    price = PriceValue.from_raw(raw)
    if price.amount > high_price_threshold:
        events.warning(
            "prediction.price_unusually_high",
            price=str(price),
            threshold=str(high_price_threshold),
        )
    return price
