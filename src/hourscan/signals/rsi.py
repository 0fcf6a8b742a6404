"""Relative Strength Index with Wilder smoothing.

Gains and losses come from consecutive close differences. The first
``period`` of each are averaged arithmetically to seed the averages, then
every later sample applies Wilder's recurrence:

    avg = (avg * (period - 1) + sample) / period

RSI = 100 - 100 / (1 + avg_gain / avg_loss), and exactly 100 when
avg_loss is zero. A flat series (no gains, no losses) therefore reads 100.

The historical series carries avg_gain/avg_loss forward instead of
replaying from index 0 for every point. Both perform the same Decimal
operations in the same order, so the values are identical.

CRITICAL: All computations use Decimal with quantize to bound precision.
"""

from collections.abc import Sequence
from decimal import Decimal

from hourscan.data.models import NormalizedPoint, to_decimal
from hourscan.signals.models import RSIPoint, RSIReport, RSIStatus

#: Precision limit for smoothed averages and RSI values (12 decimal places).
_RSI_QUANTIZE = Decimal("0.000000000001")

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
_ONE = Decimal("1")


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"RSI period must be >= 1, got {period}")


def _gain_loss(prev: Decimal, curr: Decimal) -> tuple[Decimal, Decimal]:
    delta = curr - prev
    if delta > _ZERO:
        return delta, _ZERO
    return _ZERO, -delta


def _seed(prices: Sequence[Decimal], period: int) -> tuple[Decimal, Decimal]:
    """Arithmetic mean of the first ``period`` gains and losses."""
    total_gain = _ZERO
    total_loss = _ZERO
    for i in range(1, period + 1):
        gain, loss = _gain_loss(prices[i - 1], prices[i])
        total_gain += gain
        total_loss += loss
    p = Decimal(period)
    return (total_gain / p).quantize(_RSI_QUANTIZE), (total_loss / p).quantize(_RSI_QUANTIZE)


def _smooth(avg: Decimal, sample: Decimal, period: int) -> Decimal:
    p = Decimal(period)
    return ((avg * (p - _ONE) + sample) / p).quantize(_RSI_QUANTIZE)


def _rsi_from_averages(avg_gain: Decimal, avg_loss: Decimal) -> Decimal:
    if avg_loss == _ZERO:
        return _HUNDRED
    rs = avg_gain / avg_loss
    return (_HUNDRED - _HUNDRED / (_ONE + rs)).quantize(_RSI_QUANTIZE)


def compute_rsi(prices: Sequence[Decimal], period: int = 14) -> Decimal | None:
    """Compute the RSI at the last price of the sequence.

    Args:
        prices: Close prices ordered oldest first. Float, int and str values
            are converted with ``to_decimal``.
        period: Smoothing period (default 14).

    Returns:
        RSI in [0, 100], or None when fewer than ``period + 1`` prices exist.
    """
    _check_period(period)
    if len(prices) < period + 1:
        return None
    prices = [to_decimal(p) for p in prices]

    avg_gain, avg_loss = _seed(prices, period)
    for i in range(period + 1, len(prices)):
        gain, loss = _gain_loss(prices[i - 1], prices[i])
        avg_gain = _smooth(avg_gain, gain, period)
        avg_loss = _smooth(avg_loss, loss, period)

    return _rsi_from_averages(avg_gain, avg_loss)


def compute_rsi_series(
    points: Sequence[NormalizedPoint],
    period: int = 14,
) -> list[RSIPoint]:
    """Compute one RSIPoint per index from ``period`` onward.

    Point i carries the RSI of the prefix ``points[0..=i]``, computed with a
    single forward pass.

    Args:
        points: Normalized hourly points ordered oldest first.
        period: Smoothing period (default 14).

    Returns:
        ``len(points) - period`` RSIPoints, or an empty list when there is
        insufficient data.
    """
    _check_period(period)
    if len(points) < period + 1:
        return []

    closes = [to_decimal(p.close) for p in points]
    avg_gain, avg_loss = _seed(closes, period)

    series = [
        RSIPoint(
            timestamp_ms=points[period].timestamp_ms,
            price=closes[period],
            rsi=_rsi_from_averages(avg_gain, avg_loss),
        )
    ]
    for i in range(period + 1, len(points)):
        gain, loss = _gain_loss(closes[i - 1], closes[i])
        avg_gain = _smooth(avg_gain, gain, period)
        avg_loss = _smooth(avg_loss, loss, period)
        series.append(
            RSIPoint(
                timestamp_ms=points[i].timestamp_ms,
                price=closes[i],
                rsi=_rsi_from_averages(avg_gain, avg_loss),
            )
        )
    return series


def classify_rsi(
    rsi: Decimal,
    overbought: Decimal = Decimal("70"),
    oversold: Decimal = Decimal("30"),
) -> RSIStatus:
    """Classify an RSI value into its band. Both boundaries are inclusive."""
    if rsi >= overbought:
        return RSIStatus.OVERBOUGHT
    if rsi <= oversold:
        return RSIStatus.OVERSOLD
    return RSIStatus.NEUTRAL


def build_rsi_report(
    points: Sequence[NormalizedPoint],
    period: int = 14,
    window: int = 24,
    overbought: Decimal = Decimal("70"),
    oversold: Decimal = Decimal("30"),
) -> RSIReport:
    """Build the current RSI, its band, and the trailing ``window`` points."""
    series = compute_rsi_series(points, period)
    if not series:
        return RSIReport(period=period, current=None, status=None, window=[])

    current = series[-1].rsi
    return RSIReport(
        period=period,
        current=current,
        status=classify_rsi(current, overbought, oversold),
        window=series[-window:] if window > 0 else [],
    )
