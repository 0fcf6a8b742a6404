"""Tests for the paginated candle fetcher.

All tests use a mocked ExchangeClient to avoid real API calls. Delays are
zeroed in settings and asyncio.sleep is patched where delays are asserted.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import ccxt.async_support
import pytest

from hourscan.config import ExchangeSettings
from hourscan.data.fetcher import CandleFetcher
from hourscan.exceptions import CandleFetchError

HOUR_MS = 3_600_000
BASE_MS = 1_704_585_600_000


def _row(i: int, close: str = "100") -> list:
    return [BASE_MS + i * HOUR_MS, close, close, close, close, "10"]


def _settings(**overrides) -> ExchangeSettings:
    values = {
        "hours_per_month": 5,
        "months": 1,
        "page_limit": 3,
        "max_retries": 3,
        "retry_base_delay": 0.0,
        "fetch_batch_delay": 0.0,
    }
    values.update(overrides)
    return ExchangeSettings(**values)


def _exchange(side_effect) -> MagicMock:
    exchange = MagicMock()
    exchange.fetch_ohlcv = AsyncMock(side_effect=side_effect)
    return exchange


class TestPagination:
    @pytest.mark.asyncio
    async def test_walks_backward_until_enough_candles(self) -> None:
        pages = [
            [_row(7), _row(8), _row(9)],
            [_row(4), _row(5), _row(6)],
            [_row(1), _row(2), _row(3)],
        ]
        exchange = _exchange(pages)
        fetcher = CandleFetcher(exchange, _settings())

        candles = await fetcher.fetch_candles("SOL/USDT")

        # Needed 5; two pages give 6, trimmed to the most recent 5
        assert exchange.fetch_ohlcv.await_count == 2
        assert [c.timestamp_ms for c in candles] == [BASE_MS + i * HOUR_MS for i in range(5, 10)]

        first_call = exchange.fetch_ohlcv.await_args_list[0]
        second_call = exchange.fetch_ohlcv.await_args_list[1]
        assert first_call.kwargs["params"] == {}
        assert first_call.kwargs["limit"] == 3
        assert first_call.kwargs["timeframe"] == "1h"
        assert second_call.kwargs["params"] == {"endTime": BASE_MS + 7 * HOUR_MS - 1}

    @pytest.mark.asyncio
    async def test_explicit_end_time_used_for_first_page(self) -> None:
        exchange = _exchange([[_row(1), _row(2), _row(3)], []])
        fetcher = CandleFetcher(exchange, _settings())

        await fetcher.fetch_history("SOL/USDT", end_ms=BASE_MS + 3 * HOUR_MS)

        assert exchange.fetch_ohlcv.await_args_list[0].kwargs["params"] == {
            "endTime": BASE_MS + 3 * HOUR_MS
        }

    @pytest.mark.asyncio
    async def test_stops_on_empty_page(self) -> None:
        exchange = _exchange([[_row(1), _row(2)], []])
        fetcher = CandleFetcher(exchange, _settings())

        candles = await fetcher.fetch_candles("SOL/USDT")

        assert len(candles) == 2
        assert exchange.fetch_ohlcv.await_count == 2

    @pytest.mark.asyncio
    async def test_overlapping_pages_are_deduplicated(self) -> None:
        pages = [
            [_row(7), _row(8), _row(9)],
            [_row(5), _row(6), _row(7)],
            [_row(3), _row(4), _row(5)],
        ]
        fetcher = CandleFetcher(_exchange(pages), _settings())

        candles = await fetcher.fetch_candles("SOL/USDT")

        timestamps = [c.timestamp_ms for c in candles]
        assert timestamps == sorted(set(timestamps))
        assert len(candles) == 5

    @pytest.mark.asyncio
    async def test_no_progress_guard(self) -> None:
        """The same page returned forever must not loop forever."""
        exchange = _exchange(lambda *a, **kw: [_row(1), _row(2)])
        fetcher = CandleFetcher(exchange, _settings())

        candles = await fetcher.fetch_candles("SOL/USDT")

        assert len(candles) == 2
        assert exchange.fetch_ohlcv.await_count == 2

    @pytest.mark.asyncio
    async def test_unsorted_page_returned_in_order(self) -> None:
        exchange = _exchange([[_row(3, "3"), _row(1, "1"), _row(2, "2")], []])
        fetcher = CandleFetcher(exchange, _settings())

        candles = await fetcher.fetch_candles("SOL/USDT")

        assert [c.close for c in candles] == [Decimal("1"), Decimal("2"), Decimal("3")]

    @pytest.mark.asyncio
    async def test_progress_callback(self) -> None:
        calls: list[tuple[int, int]] = []
        exchange = _exchange([[_row(7), _row(8), _row(9)], [_row(4), _row(5), _row(6)]])
        fetcher = CandleFetcher(exchange, _settings())

        await fetcher.fetch_history("SOL/USDT", progress_callback=lambda f, t: calls.append((f, t)))

        assert calls == [(3, 5), (5, 5)]


class TestRetry:
    @pytest.mark.asyncio
    async def test_retries_transient_error(self) -> None:
        exchange = _exchange([RuntimeError("boom"), [_row(1)], []])
        fetcher = CandleFetcher(exchange, _settings())

        candles = await fetcher.fetch_candles("SOL/USDT")

        assert len(candles) == 1
        assert exchange.fetch_ohlcv.await_count == 3

    @pytest.mark.asyncio
    async def test_permanent_failure_raises_candle_fetch_error(self) -> None:
        exchange = _exchange(RuntimeError("down"))
        fetcher = CandleFetcher(exchange, _settings(max_retries=2))

        with pytest.raises(CandleFetchError, match="down"):
            await fetcher.fetch_candles("SOL/USDT")
        assert exchange.fetch_ohlcv.await_count == 2

    @pytest.mark.asyncio
    async def test_rate_limit_gets_longer_delay(self) -> None:
        exchange = _exchange([
            ccxt.async_support.RateLimitExceeded("slow down"),
            RuntimeError("blip"),
            [_row(1)],
            [],
        ])
        fetcher = CandleFetcher(exchange, _settings(retry_base_delay=1.0, max_retries=5))

        with patch("hourscan.data.fetcher.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await fetcher.fetch_candles("SOL/USDT")

        delays = [c.args[0] for c in sleep.await_args_list]
        # attempt 0 rate-limited: 1 * 3; attempt 1 generic: 2; then batch delay 0.0
        assert delays[:2] == [3.0, 2.0]
