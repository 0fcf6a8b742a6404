"""Pattern mining data models.

Defines per-trade detail (TradeInstance), aggregated buy/sell bucket
patterns (Pattern) and the AnalysisRun progress/cancellation handle.

CRITICAL: All prices use Decimal. Never use float for prices or profits.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from hourscan.data.models import DayHourKey
from hourscan.exceptions import AnalysisCancelledError

_CENTS = Decimal("0.01")
_HUNDRED = Decimal("100")
_ZERO = Decimal("0")

#: Progress callback signature: (units_completed, units_total, label).
ProgressCallback = Callable[[int, int, str], None]


def _money(value: Decimal) -> str:
    return str(value.quantize(_CENTS, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class TradeInstance:
    """One profitable historical buy→sell pairing.

    Only instances with ``sell_price > buy_price`` are ever constructed.
    """

    buy_index: int
    sell_index: int
    buy_price: Decimal
    sell_price: Decimal
    profit: Decimal
    buy_timestamp_ms: int
    sell_timestamp_ms: int

    def to_dict(self) -> dict:
        return {
            "buy_index": self.buy_index,
            "sell_index": self.sell_index,
            "buy_timestamp_ms": self.buy_timestamp_ms,
            "sell_timestamp_ms": self.sell_timestamp_ms,
            "buy_price": _money(self.buy_price),
            "sell_price": _money(self.sell_price),
            "profit": _money(self.profit),
        }


@dataclass(frozen=True)
class Pattern:
    """A recurring buy-bucket → sell-bucket pairing with its aggregates.

    Aggregates are derived from ``instances``, which always holds every
    profitable instance found. Use ``recent_instances`` for display.
    """

    buy_key: DayHourKey
    sell_key: DayHourKey
    instances: tuple[TradeInstance, ...]

    @property
    def occurrence_count(self) -> int:
        return len(self.instances)

    @property
    def total_profit(self) -> Decimal:
        return sum((i.profit for i in self.instances), _ZERO)

    @property
    def average_profit(self) -> Decimal:
        if not self.instances:
            return _ZERO
        return self.total_profit / Decimal(self.occurrence_count)

    @property
    def average_buy_price(self) -> Decimal:
        if not self.instances:
            return _ZERO
        total = sum((i.buy_price for i in self.instances), _ZERO)
        return total / Decimal(self.occurrence_count)

    @property
    def average_roi_percent(self) -> Decimal:
        avg_buy = self.average_buy_price
        if avg_buy == _ZERO:
            return _ZERO
        return self.average_profit / avg_buy * _HUNDRED

    def recent_instances(self, n: int = 3) -> list[TradeInstance]:
        """Return the last ``n`` instances in chronological order."""
        if n <= 0:
            return []
        return list(self.instances[-n:])

    def to_dict(self, recent: int | None = 3) -> dict:
        """Serialize to a JSON-safe dict with 2-decimal money strings.

        Args:
            recent: Number of trailing instances to include (None = all).
        """
        instances = list(self.instances) if recent is None else self.recent_instances(recent)
        return {
            "buy_day": self.buy_key.day.label,
            "buy_hour": f"{self.buy_key.hour:02d}",
            "sell_day": self.sell_key.day.label,
            "sell_hour": f"{self.sell_key.hour:02d}",
            "occurrence_count": self.occurrence_count,
            "average_profit": _money(self.average_profit),
            "average_roi_percent": _money(self.average_roi_percent),
            "instances": [i.to_dict() for i in instances],
        }


@dataclass
class AnalysisRun:
    """Progress counters and cancellation flag for one analysis.

    Passed into the miner and scanner in place of shared UI state. The
    cancellation flag is a threading.Event so a run mined in a worker
    thread can be cancelled from the event loop.

    Args:
        on_progress: Optional callback(units_completed, units_total, label).
    """

    on_progress: ProgressCallback | None = None
    units_completed: int = 0
    units_total: int = 0
    label: str = ""
    _cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)

    def start(self, units_total: int, label: str = "Starting analysis...") -> None:
        self.units_completed = 0
        self.units_total = units_total
        self.label = label

    def advance(self, label: str) -> None:
        """Mark one unit complete and notify the progress callback."""
        self.units_completed += 1
        self.label = label
        if self.on_progress is not None:
            self.on_progress(self.units_completed, self.units_total, label)

    @property
    def percent(self) -> int:
        if self.units_total == 0:
            return 0
        return round(self.units_completed * 100 / self.units_total)

    def child(self) -> AnalysisRun:
        """Return a run with its own counters that shares this run's cancellation."""
        return AnalysisRun(_cancel_event=self._cancel_event)

    def cancel(self) -> None:
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._cancel_event.is_set():
            raise AnalysisCancelledError("analysis cancelled")
