"""Custom exceptions for hourscan.

Kept in one module so the data, pattern and API layers can share them
without importing each other.

Insufficient RSI history and a zero average loss are ordinary outcomes
(``None`` and 100 respectively) and have no exception class.
"""


class HourscanError(Exception):
    """Base exception for all hourscan errors."""


class InvalidInputError(HourscanError):
    """Raised when a candle sequence is empty, unordered, or has bad prices."""


class AnalysisCancelledError(HourscanError):
    """Raised when an analysis run observes a cancellation request."""


class CandleFetchError(HourscanError):
    """Raised when candles for a symbol cannot be retrieved from the exchange."""
