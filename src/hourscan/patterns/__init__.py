"""Day/hour buy→sell pattern mining.

Provides the pattern models, the single parameterized mining engine
(whole-history and target-day variants), the multi-symbol scanner, and
plain-text report formatting.
"""

from hourscan.patterns.miner import find_patterns_for_day, mine_patterns, rank_patterns
from hourscan.patterns.models import AnalysisRun, Pattern, TradeInstance
from hourscan.patterns.report import format_patterns, format_scan_summary
from hourscan.patterns.scanner import (
    DEFAULT_WATCHLIST,
    PatternScanner,
    ScanResult,
    SymbolAnalysis,
    WatchlistEntry,
    parse_target_day,
    resolve_target_day,
)

__all__ = [
    "DEFAULT_WATCHLIST",
    "AnalysisRun",
    "Pattern",
    "PatternScanner",
    "ScanResult",
    "SymbolAnalysis",
    "TradeInstance",
    "WatchlistEntry",
    "find_patterns_for_day",
    "format_patterns",
    "format_scan_summary",
    "mine_patterns",
    "parse_target_day",
    "rank_patterns",
    "resolve_target_day",
]
