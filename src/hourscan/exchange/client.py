"""Abstract exchange client interface.

Fetch code depends only on this interface, keeping ccxt details isolated
in the concrete implementation.
"""

from abc import ABC, abstractmethod


class ExchangeClient(ABC):
    """Abstract base class for exchange market-data clients."""

    @abstractmethod
    async def connect(self) -> None:
        """Initialize connection and load markets."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources (CRITICAL for ccxt async)."""
        ...

    @abstractmethod
    async def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1h",
        since: int | None = None,
        limit: int = 1000,
        params: dict | None = None,
    ) -> list[list]:
        """Fetch OHLCV candle data.

        Returns list of [timestamp_ms, open, high, low, close, volume],
        oldest first. Pagination is NOT handled here -- callers iterate
        with an ``endTime`` param.
        """
        ...
