"""Tests for the price summary analytics."""

from decimal import Decimal

from hourscan.analytics.summary import compute_price_summary
from hourscan.data.models import Candle
from hourscan.data.normalizer import normalize

HOUR_MS = 3_600_000
SUNDAY_MS = 1_704_585_600_000


def _points(closes: list[str]):
    return normalize([
        Candle(timestamp_ms=SUNDAY_MS + i * HOUR_MS, close=Decimal(c))
        for i, c in enumerate(closes)
    ])


class TestComputePriceSummary:
    def test_empty_returns_none(self) -> None:
        assert compute_price_summary([]) is None

    def test_basic_statistics(self) -> None:
        summary = compute_price_summary(_points(["100", "120", "90", "110"]))

        assert summary is not None
        assert summary.periods == 4
        assert summary.first == Decimal("100")
        assert summary.last == Decimal("110")
        assert summary.highest == Decimal("120")
        assert summary.lowest == Decimal("90")
        assert summary.total_change == Decimal("10")
        assert summary.change_percent == Decimal("10")

    def test_single_point(self) -> None:
        summary = compute_price_summary(_points(["42.5"]))
        assert summary.total_change == Decimal("0")
        assert summary.change_percent == Decimal("0")

    def test_to_dict_rounds_changes(self) -> None:
        summary = compute_price_summary(_points(["3", "2"]))
        data = summary.to_dict()

        assert data["first"] == "3"
        assert data["last"] == "2"
        assert data["total_change"] == "-1.00"
        assert data["change_percent"] == "-33.33"
