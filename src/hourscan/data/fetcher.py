"""Paginated hourly candle fetch with retry and progress logging.

Walks backward from an optional end time using the exchange's ``endTime``
kline parameter until ``months * hours_per_month`` candles are collected,
then returns them oldest first with duplicates from overlapping pages
removed.

CRITICAL implementation notes:
- Binance klines max limit: 1000 per call
- Next page ends 1 ms before the oldest candle of the previous page
- A page with no new candles stops pagination (no-progress guard)
"""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

import ccxt.async_support

from hourscan.config import ExchangeSettings
from hourscan.data.models import Candle
from hourscan.exceptions import CandleFetchError
from hourscan.exchange.client import ExchangeClient
from hourscan.logging import get_logger

logger = get_logger(__name__)


class CandleSource(ABC):
    """Anything that can supply an ordered hourly candle history for a symbol."""

    @abstractmethod
    async def fetch_candles(self, symbol: str) -> list[Candle]:
        """Return hourly candles for ``symbol``, oldest first, no duplicates."""
        ...


class CandleFetcher(CandleSource):
    """Fetches hourly candle history from an exchange client.

    Usage:
        fetcher = CandleFetcher(exchange, settings)
        candles = await fetcher.fetch_candles("SOL/USDT")
    """

    def __init__(self, exchange: ExchangeClient, settings: ExchangeSettings) -> None:
        self._exchange = exchange
        self._settings = settings

    async def fetch_candles(self, symbol: str) -> list[Candle]:
        """Fetch the configured number of months of hourly candles."""
        return await self.fetch_history(symbol)

    async def fetch_history(
        self,
        symbol: str,
        months: int | None = None,
        end_ms: int | None = None,
        progress_callback: Callable | None = None,
    ) -> list[Candle]:
        """Fetch ``months`` of hourly candles ending at ``end_ms`` (default: latest).

        Args:
            symbol: ccxt unified symbol, e.g. "SOL/USDT".
            months: Months of history; defaults to settings.months.
            end_ms: Inclusive end of the window in epoch milliseconds.
            progress_callback: Optional callback(fetched, total_needed).

        Returns:
            Candles oldest first, at most ``months * hours_per_month`` of them.

        Raises:
            CandleFetchError: If a page keeps failing after all retries.
        """
        months = months if months is not None else self._settings.months
        total_needed = months * self._settings.hours_per_month
        start_time = time.monotonic()

        rows: dict[int, list] = {}
        current_end = end_ms

        while len(rows) < total_needed:
            page = await self._fetch_page(symbol, current_end)
            if not page:
                break

            page = sorted(page, key=lambda row: row[0])
            before = len(rows)
            for row in page:
                rows.setdefault(int(row[0]), row)

            oldest_ts = int(page[0][0])
            if len(rows) == before or (current_end is not None and oldest_ts > current_end):
                break  # exchange ignored endTime or returned a page we already have

            current_end = oldest_ts - 1

            if progress_callback is not None:
                progress_callback(min(len(rows), total_needed), total_needed)

            if len(rows) < total_needed:
                await asyncio.sleep(self._settings.fetch_batch_delay)

        ordered = [rows[ts] for ts in sorted(rows)][-total_needed:]
        candles = [Candle.from_ohlcv(row) for row in ordered]

        logger.info(
            "candle_fetch_complete",
            symbol=symbol,
            candles=len(candles),
            requested=total_needed,
            duration_seconds=round(time.monotonic() - start_time, 2),
        )
        return candles

    def _retry_delay(self, attempt: int, error: Exception) -> float:
        """Backoff before retry ``attempt + 1``: base * 2**attempt, tripled when rate limited."""
        delay = self._settings.retry_base_delay * (2**attempt)
        if isinstance(error, ccxt.async_support.RateLimitExceeded):
            delay *= 3
        return delay

    async def _fetch_page(self, symbol: str, end_ms: int | None) -> list:
        """Fetch one page of klines ending at ``end_ms``, retrying transient failures.

        Raises:
            CandleFetchError: When every attempt fails.
        """
        params = {"endTime": end_ms} if end_ms is not None else {}
        attempts = max(1, self._settings.max_retries)

        for attempt in range(attempts):
            try:
                return await self._exchange.fetch_ohlcv(
                    symbol,
                    timeframe=self._settings.timeframe,
                    limit=self._settings.page_limit,
                    params=params,
                )
            except Exception as e:
                if attempt + 1 >= attempts:
                    logger.error(
                        "candle_page_failed",
                        symbol=symbol,
                        end_ms=end_ms,
                        attempts=attempts,
                        error=str(e),
                    )
                    raise CandleFetchError(
                        f"Failed to fetch candles for {symbol} after {attempts} attempts: {e}"
                    ) from e

                delay = self._retry_delay(attempt, e)
                logger.warning(
                    "candle_page_retry",
                    symbol=symbol,
                    attempt=attempt + 1,
                    rate_limited=isinstance(e, ccxt.async_support.RateLimitExceeded),
                    delay=delay,
                    error=str(e),
                )
                await asyncio.sleep(delay)

        raise CandleFetchError(f"No fetch attempt made for {symbol}")
