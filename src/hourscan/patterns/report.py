"""Plain-text summaries of mined patterns and scan results.

Presentation only: instance lists are cut to the most recent few here,
never in the miner.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import TYPE_CHECKING

from hourscan.data.normalizer import resolve_timezone
from hourscan.patterns.models import Pattern, TradeInstance

if TYPE_CHECKING:
    from hourscan.patterns.scanner import ScanResult


def _format_ts(timestamp_ms: int, zone: tzinfo) -> str:
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=zone)
    return dt.strftime("%a, %m/%d/%y, %H:%M")


def _format_instance(instance: TradeInstance, zone: tzinfo) -> str:
    return (
        f"Buy: ${instance.buy_price:.2f} ({_format_ts(instance.buy_timestamp_ms, zone)}) -> "
        f"Sell: ${instance.sell_price:.2f} ({_format_ts(instance.sell_timestamp_ms, zone)}) = "
        f"+${instance.profit:.2f}"
    )


def format_pattern(pattern: Pattern, rank: int, recent: int = 3, tz: str = "UTC") -> list[str]:
    """Format one pattern as display lines."""
    zone = resolve_timezone(tz)
    lines = [
        f"#{rank}: Buy {pattern.buy_key} -> Sell {pattern.sell_key}"
        f"  ({pattern.occurrence_count} times profitable)",
        f"    Average profit per trade: ${pattern.average_profit:.2f}"
        f" (ROI: {pattern.average_roi_percent:.2f}%)",
    ]
    for instance in pattern.recent_instances(recent):
        lines.append(f"      {_format_instance(instance, zone)}")
    return lines


def format_patterns(
    patterns: list[Pattern],
    recent: int = 3,
    periods: int | None = None,
    tz: str = "UTC",
) -> str:
    """Format a ranked pattern list for console output.

    Args:
        patterns: Ranked patterns from mine_patterns.
        recent: Trailing instances shown per pattern.
        periods: Number of hourly periods analysed, for the footer note.
        tz: Zone used to display instance timestamps.

    Returns:
        Formatted multi-line string.
    """
    if not patterns:
        return "No profitable trading patterns found."

    lines: list[str] = []
    lines.append("=" * 80)
    lines.append(f"TOP {len(patterns)} MOST PROFITABLE TRADING PATTERNS")
    lines.append("=" * 80)
    for rank, pattern in enumerate(patterns, 1):
        lines.extend(format_pattern(pattern, rank, recent, tz))
        lines.append("")
    if periods is not None:
        lines.append(f"Based on {periods} periods of historical data.")
    lines.append("Past performance does not guarantee future results.")
    lines.append("=" * 80)
    return "\n".join(lines)


def format_scan_summary(result: ScanResult, recent: int = 3, tz: str = "UTC") -> str:
    """Format a multi-symbol scan, best symbol first, with failures listed last."""
    lines: list[str] = []
    lines.append("=" * 80)
    day_label = result.target_day.label if result.target_day is not None else "All days"
    lines.append(f"{day_label}: MOST PROFITABLE TRADING PATTERNS")
    lines.append("=" * 80)

    if not result.ranked:
        lines.append(f"No profitable trading patterns were found for {day_label}.")
    for analysis in result.ranked:
        lines.append(f"{analysis.name} ({analysis.symbol})")
        for rank, pattern in enumerate(analysis.patterns, 1):
            lines.extend(format_pattern(pattern, rank, recent, tz))
        lines.append("-" * 80)

    if result.failed:
        lines.append("FAILED SYMBOLS:")
        for analysis in result.failed:
            lines.append(f"  {analysis.symbol}: {analysis.error}")
    lines.append("=" * 80)
    return "\n".join(lines)
