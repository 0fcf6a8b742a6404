"""Price summary over an analysed period.

Pure Decimal analytics: first/last/high/low close, absolute and percent change.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from hourscan.data.models import NormalizedPoint

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class PriceSummary:
    """Summary statistics for a normalized price series."""

    periods: int
    first: Decimal
    last: Decimal
    highest: Decimal
    lowest: Decimal
    total_change: Decimal
    change_percent: Decimal

    def to_dict(self) -> dict:
        """Serialize to JSON-safe dict with 2-decimal strings."""
        return {
            "periods": self.periods,
            "first": str(self.first),
            "last": str(self.last),
            "highest": str(self.highest),
            "lowest": str(self.lowest),
            "total_change": str(self.total_change.quantize(_CENTS, rounding=ROUND_HALF_UP)),
            "change_percent": str(self.change_percent.quantize(_CENTS, rounding=ROUND_HALF_UP)),
        }


def compute_price_summary(points: Sequence[NormalizedPoint]) -> PriceSummary | None:
    """Compute summary statistics, or None for an empty series.

    Args:
        points: Normalized points ordered oldest first.

    Returns:
        PriceSummary, or None if ``points`` is empty.
    """
    if not points:
        return None

    closes = [p.close for p in points]
    first = closes[0]
    last = closes[-1]
    total_change = last - first
    # Normalizer guarantees positive closes, so first is never zero
    change_percent = total_change / first * Decimal("100")

    return PriceSummary(
        periods=len(closes),
        first=first,
        last=last,
        highest=max(closes),
        lowest=min(closes),
        total_change=total_change,
        change_percent=change_percent,
    )
