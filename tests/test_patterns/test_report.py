"""Tests for plain-text pattern and scan summaries."""

from decimal import Decimal

from hourscan.data.models import DayHourKey, DayOfWeek
from hourscan.patterns.models import Pattern, TradeInstance
from hourscan.patterns.report import format_pattern, format_patterns, format_scan_summary
from hourscan.patterns.scanner import ScanResult, SymbolAnalysis

HOUR_MS = 3_600_000
MONDAY_9_MS = 1_704_585_600_000 + 33 * HOUR_MS  # Mon 2024-01-08 09:00 UTC
WEEK_MS = 168 * HOUR_MS


def _pattern(weeks: int = 4) -> Pattern:
    instances = tuple(
        TradeInstance(
            buy_index=w * 2,
            sell_index=w * 2 + 1,
            buy_price=Decimal("100"),
            sell_price=Decimal("105"),
            profit=Decimal("5"),
            buy_timestamp_ms=MONDAY_9_MS + w * WEEK_MS,
            sell_timestamp_ms=MONDAY_9_MS + w * WEEK_MS + 110 * HOUR_MS,
        )
        for w in range(weeks)
    )
    return Pattern(DayHourKey(DayOfWeek.MON, 9), DayHourKey(DayOfWeek.FRI, 23), instances)


class TestFormatPatterns:
    def test_empty(self) -> None:
        assert format_patterns([]) == "No profitable trading patterns found."

    def test_header_and_footer(self) -> None:
        text = format_patterns([_pattern()], periods=720)

        assert "TOP 1 MOST PROFITABLE TRADING PATTERNS" in text
        assert "#1: Buy Mon 09:00 -> Sell Fri 23:00  (4 times profitable)" in text
        assert "Average profit per trade: $5.00 (ROI: 5.00%)" in text
        assert "Based on 720 periods of historical data." in text

    def test_only_recent_instances_shown(self) -> None:
        lines = format_pattern(_pattern(weeks=5), rank=1, recent=3)
        instance_lines = [line for line in lines if "Buy: $" in line]
        assert len(instance_lines) == 3

    def test_instance_timestamps_use_zone(self) -> None:
        utc = "\n".join(format_pattern(_pattern(weeks=1), rank=1))
        karachi = "\n".join(format_pattern(_pattern(weeks=1), rank=1, tz="Asia/Karachi"))

        assert "Mon, 01/08/24, 09:00" in utc
        assert "Mon, 01/08/24, 14:00" in karachi


class TestFormatScanSummary:
    def test_ranked_and_failed(self) -> None:
        result = ScanResult(
            target_day=DayOfWeek.MON,
            ranked=[SymbolAnalysis("SOL/USDT", "Solana", patterns=[_pattern()])],
            failed=[SymbolAnalysis("XMR/USDT", "Monero", error="symbol not listed")],
        )

        text = format_scan_summary(result)

        assert "Mon: MOST PROFITABLE TRADING PATTERNS" in text
        assert "Solana (SOL/USDT)" in text
        assert "FAILED SYMBOLS:" in text
        assert "XMR/USDT: symbol not listed" in text

    def test_nothing_found(self) -> None:
        text = format_scan_summary(ScanResult(target_day=None))
        assert "No profitable trading patterns were found for All days." in text
        assert "FAILED SYMBOLS" not in text
