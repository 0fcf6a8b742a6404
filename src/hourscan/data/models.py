"""Data models for hourly candles and their day/hour bucketing.

CRITICAL: All prices use Decimal. Never use float for prices or volumes.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import IntEnum

HOURS_PER_DAY = 24


def to_decimal(value: object) -> Decimal:
    """Convert an exchange value (str, int, float, Decimal) to Decimal.

    Floats go through ``str`` so 0.1 stays 0.1 instead of its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class DayOfWeek(IntEnum):
    """Day of week in canonical enumeration order (Sunday first)."""

    SUN = 0
    MON = 1
    TUE = 2
    WED = 3
    THU = 4
    FRI = 5
    SAT = 6

    @property
    def label(self) -> str:
        """Short English label, e.g. "Mon"."""
        return self.name.capitalize()

    @classmethod
    def from_datetime(cls, dt: datetime) -> DayOfWeek:
        # datetime.weekday() is Monday=0
        return cls((dt.weekday() + 1) % 7)

    @classmethod
    def parse(cls, value: str) -> DayOfWeek:
        """Parse a short or long day name ("mon", "Monday") case-insensitively."""
        try:
            return cls[value.strip()[:3].upper()]
        except KeyError:
            raise ValueError(f"Unknown day of week: {value!r}") from None


@dataclass(frozen=True, order=True)
class DayHourKey:
    """A (day-of-week, hour-of-day) bucket. 168 distinct values.

    Ordering and ``index`` follow the canonical day-major, hour-minor
    enumeration.
    """

    day: DayOfWeek
    hour: int

    def __post_init__(self) -> None:
        if not 0 <= self.hour < HOURS_PER_DAY:
            raise ValueError(f"hour must be in 0..23, got {self.hour}")
        object.__setattr__(self, "day", DayOfWeek(self.day))

    @property
    def index(self) -> int:
        return self.day * HOURS_PER_DAY + self.hour

    @classmethod
    def from_index(cls, index: int) -> DayHourKey:
        day, hour = divmod(index, HOURS_PER_DAY)
        return cls(DayOfWeek(day), hour)

    def __str__(self) -> str:
        return f"{self.day.label} {self.hour:02d}:00"


def all_keys(day: DayOfWeek | None = None) -> Iterator[DayHourKey]:
    """Yield keys in canonical order, optionally restricted to a single day."""
    days = list(DayOfWeek) if day is None else [day]
    for d in days:
        for hour in range(HOURS_PER_DAY):
            yield DayHourKey(d, hour)


@dataclass(frozen=True)
class Candle:
    """A single hourly candle as delivered by the exchange.

    Only the open time and close price feed the analytics; volume is
    carried through for callers.
    """

    timestamp_ms: int
    close: Decimal
    volume: Decimal = Decimal("0")

    @classmethod
    def from_ohlcv(cls, row: Sequence) -> Candle:
        """Build from a ccxt OHLCV row ``[ts, open, high, low, close, volume]``."""
        volume = row[5] if len(row) > 5 and row[5] is not None else 0
        return cls(
            timestamp_ms=int(row[0]),
            close=to_decimal(row[4]),
            volume=to_decimal(volume),
        )


@dataclass(frozen=True)
class NormalizedPoint:
    """A candle placed in its day/hour bucket.

    ``index`` equals the point's position in the normalized sequence.
    ``change_from_prev`` is 0 for the first point.
    """

    index: int
    timestamp_ms: int
    day: DayOfWeek
    hour: int
    close: Decimal
    change_from_prev: Decimal

    @property
    def key(self) -> DayHourKey:
        return DayHourKey(self.day, self.hour)
