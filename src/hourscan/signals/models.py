"""RSI data models.

CRITICAL: RSI values and prices use Decimal. Never use float for signal computations.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class RSIStatus(str, Enum):
    """RSI band classification."""

    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class RSIPoint:
    """RSI value at one hourly timestamp."""

    timestamp_ms: int
    price: Decimal
    rsi: Decimal  # 0-100

    def to_dict(self) -> dict:
        return {
            "timestamp_ms": self.timestamp_ms,
            "price": str(self.price),
            "rsi": str(self.rsi.quantize(Decimal("0.01"))),
        }


@dataclass
class RSIReport:
    """Current RSI with its band and a trailing window of history.

    ``current`` is None when the series is shorter than ``period + 1``;
    ``status`` is None in that case as well.
    """

    period: int
    current: Decimal | None
    status: RSIStatus | None
    window: list[RSIPoint] = field(default_factory=list)

    @property
    def has_value(self) -> bool:
        return self.current is not None

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "current": str(self.current.quantize(Decimal("0.01"))) if self.current is not None else None,
            "status": self.status.value if self.status is not None else None,
            "window": [p.to_dict() for p in self.window],
        }
