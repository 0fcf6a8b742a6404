"""Entry point for hourscan.

Wires settings, logging, the ccxt exchange client and the candle fetcher
together, then either serves the JSON API via uvicorn (API_ENABLED=true, the
default) or runs one watchlist scan for today and prints the summary.

Component wiring order (in _build_components):
1. ExchangeClient (ccxt, public endpoints only)
2. CandleFetcher (paginated hourly history)
3. PatternScanner (multi-symbol mining)
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from hourscan.config import AppSettings
from hourscan.data.fetcher import CandleFetcher
from hourscan.exchange.ccxt_client import CcxtExchangeClient
from hourscan.logging import get_logger, setup_logging
from hourscan.patterns.report import format_scan_summary
from hourscan.patterns.scanner import PatternScanner, resolve_target_day


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build the exchange client, fetcher and scanner from settings.

    Note: Does NOT call exchange_client.connect() -- that happens in the
    lifespan (API mode) or run() (one-shot mode).
    """
    exchange_client = CcxtExchangeClient(settings.exchange)
    fetcher = CandleFetcher(exchange_client, settings.exchange)
    scanner = PatternScanner(fetcher, settings.analysis, settings.scan)
    return {
        "exchange_client": exchange_client,
        "fetcher": fetcher,
        "scanner": scanner,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to the exchange on startup and release it on shutdown."""
    logger = get_logger("hourscan.main")
    exchange_client = app.state.exchange_client

    await exchange_client.connect()
    logger.info("lifespan_started")

    yield

    await exchange_client.close()
    logger.info("hourscan_stopped")


async def run() -> None:
    """Run hourscan as an API server or a one-shot scan."""
    settings = AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("hourscan.main")

    components = _build_components(settings)

    if settings.api.enabled:
        from hourscan.api.app import create_app

        app = create_app(components["fetcher"], settings, lifespan=lifespan)
        app.state.exchange_client = components["exchange_client"]

        logger.info("starting_api", host=settings.api.host, port=settings.api.port)

        config = uvicorn.Config(
            app,
            host=settings.api.host,
            port=settings.api.port,
            log_level="warning",  # Suppress uvicorn access logs
        )
        server = uvicorn.Server(config)
        await server.serve()
    else:
        target_day = resolve_target_day("today", tz=settings.analysis.timezone)
        logger.info("starting_one_shot_scan", target_day=target_day.label)
        try:
            await components["exchange_client"].connect()
            result = await components["scanner"].scan(target_day=target_day)
            print(
                format_scan_summary(
                    result,
                    recent=settings.analysis.recent_instances,
                    tz=settings.analysis.timezone,
                )
            )
        finally:
            await components["exchange_client"].close()
            logger.info("hourscan_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
