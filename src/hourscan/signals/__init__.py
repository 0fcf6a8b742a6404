"""RSI oscillator with Wilder smoothing.

Provides single-value and streaming historical RSI computation, band
classification, and the report used by the API.
"""

from hourscan.signals.models import RSIPoint, RSIReport, RSIStatus
from hourscan.signals.rsi import build_rsi_report, classify_rsi, compute_rsi, compute_rsi_series

__all__ = [
    "RSIPoint",
    "RSIReport",
    "RSIStatus",
    "build_rsi_report",
    "classify_rsi",
    "compute_rsi",
    "compute_rsi_series",
]
