"""Candle normalization into day/hour bucketed points.

Bucketing uses one explicit IANA time zone chosen by the caller (default UTC).
The same zone is used for RSI display timestamps, so a point's bucket and its
displayed wall-clock hour always agree.

Unsorted or duplicated candles are rejected rather than repaired: callers
must sort and de-duplicate upstream (the CandleFetcher already does).
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, tzinfo
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from hourscan.data.models import Candle, DayOfWeek, NormalizedPoint, to_decimal
from hourscan.exceptions import InvalidInputError
from hourscan.logging import get_logger

logger = get_logger(__name__)

_ZERO = Decimal("0")


@lru_cache(maxsize=32)
def resolve_timezone(name: str) -> tzinfo:
    """Resolve an IANA zone name, raising InvalidInputError for unknown zones."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidInputError(f"Unknown time zone: {name!r}") from e


def bucket_of(timestamp_ms: int, tz: tzinfo) -> tuple[DayOfWeek, int]:
    """Return the (day, hour) bucket of an epoch-millisecond timestamp in ``tz``."""
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=tz)
    return DayOfWeek.from_datetime(dt), dt.hour


def _validate(candles: Sequence[Candle]) -> list[Decimal]:
    """Check ordering and prices; return the closes as Decimal."""
    if not candles:
        raise InvalidInputError("Candle sequence is empty")

    closes: list[Decimal] = []
    prev_ts: int | None = None
    for i, candle in enumerate(candles):
        if not isinstance(candle.timestamp_ms, int) or isinstance(candle.timestamp_ms, bool):
            raise InvalidInputError(
                f"Candle {i} has a non-integer timestamp: {candle.timestamp_ms!r}"
            )
        try:
            close = to_decimal(candle.close)
        except InvalidOperation:
            raise InvalidInputError(f"Candle {i} has a non-numeric close: {candle.close!r}") from None
        if not close.is_finite():
            raise InvalidInputError(f"Candle {i} has a non-finite close: {candle.close!r}")
        if close <= _ZERO:
            raise InvalidInputError(f"Candle {i} has a non-positive close: {close}")
        if prev_ts is not None and candle.timestamp_ms <= prev_ts:
            raise InvalidInputError(
                f"Candle {i} is not strictly after candle {i - 1} "
                f"({candle.timestamp_ms} <= {prev_ts})"
            )
        prev_ts = candle.timestamp_ms
        closes.append(close)
    return closes


def normalize(candles: Sequence[Candle], tz: str = "UTC") -> list[NormalizedPoint]:
    """Convert ordered candles into NormalizedPoints.

    Pure function: the same input always yields the same output and the
    current time is never consulted.

    Args:
        candles: Hourly candles, strictly ascending by timestamp.
        tz: IANA time zone name used for day-of-week/hour bucketing.

    Returns:
        One NormalizedPoint per candle, ``index`` matching its position.

    Raises:
        InvalidInputError: If the sequence is empty, not strictly ascending,
            or contains a non-numeric, non-finite or non-positive close.
            Float, int and str closes are converted with ``to_decimal``.
    """
    closes = _validate(candles)
    zone = resolve_timezone(tz)

    points: list[NormalizedPoint] = []
    prev_close: Decimal | None = None
    for i, (candle, close) in enumerate(zip(candles, closes)):
        day, hour = bucket_of(candle.timestamp_ms, zone)
        change = _ZERO if prev_close is None else close - prev_close
        points.append(
            NormalizedPoint(
                index=i,
                timestamp_ms=candle.timestamp_ms,
                day=day,
                hour=hour,
                close=close,
                change_from_prev=change,
            )
        )
        prev_close = close

    logger.debug(
        "candles_normalized",
        count=len(points),
        timezone=tz,
        first_ms=points[0].timestamp_ms,
        last_ms=points[-1].timestamp_ms,
    )
    return points


def prices(points: Sequence[NormalizedPoint]) -> list[Decimal]:
    """Return the close price sequence of normalized points."""
    return [p.close for p in points]
