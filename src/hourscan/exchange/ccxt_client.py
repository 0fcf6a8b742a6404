"""ccxt-backed exchange client for public market data.

Wraps a ``ccxt.async_support`` exchange (Binance spot by default) with
market loading and async cleanup. No API keys are needed for klines.
"""

import ccxt.async_support as ccxt_async

from hourscan.config import ExchangeSettings
from hourscan.exchange.client import ExchangeClient
from hourscan.logging import get_logger

logger = get_logger(__name__)


class CcxtExchangeClient(ExchangeClient):
    """Concrete exchange client using ccxt async."""

    def __init__(self, settings: ExchangeSettings) -> None:
        self._settings = settings
        exchange_cls = getattr(ccxt_async, settings.exchange_id, None)
        if exchange_cls is None:
            raise ValueError(f"Unknown ccxt exchange id: {settings.exchange_id!r}")
        self._exchange = exchange_cls({"enableRateLimit": True})
        self._markets: dict = {}

    @property
    def exchange(self):
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def connect(self) -> None:
        """Initialize connection by loading markets."""
        logger.info("connecting_to_exchange", exchange=self._settings.exchange_id)
        self._markets = await self._exchange.load_markets()
        logger.info(
            "exchange_connected",
            exchange=self._settings.exchange_id,
            market_count=len(self._markets),
        )

    async def close(self) -> None:
        """Clean up ccxt async resources. CRITICAL: must be called to avoid resource leaks."""
        logger.info("closing_exchange_connection", exchange=self._settings.exchange_id)
        await self._exchange.close()

    async def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1h",
        since: int | None = None,
        limit: int = 1000,
        params: dict | None = None,
    ) -> list[list]:
        """Fetch OHLCV candles via ccxt."""
        return await self._exchange.fetch_ohlcv(
            symbol,
            timeframe=timeframe,
            since=since,
            limit=limit,
            params=params or {},
        )
