"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI

from hourscan.api import routes
from hourscan.config import AppSettings
from hourscan.data.fetcher import CandleSource
from hourscan.patterns.scanner import DEFAULT_WATCHLIST, PatternScanner, WatchlistEntry


def create_app(
    source: CandleSource,
    settings: AppSettings | None = None,
    watchlist: Sequence[WatchlistEntry] = DEFAULT_WATCHLIST,
    lifespan: Any = None,
) -> FastAPI:
    """Create and configure the JSON API application.

    Args:
        source: Candle source shared by all endpoints.
        settings: Application settings. Defaults to environment-loaded settings.
        watchlist: Symbols covered by the scan endpoint.
        lifespan: Optional async context manager for startup/shutdown.
                  Used by main.py to close the exchange connection.

    Returns:
        Configured FastAPI application with routes under /api.
    """
    settings = settings or AppSettings()

    app = FastAPI(
        title="hourscan",
        description="Day/hour pattern mining and RSI over hourly candles",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.source = source
    app.state.watchlist = list(watchlist)
    app.state.scanner = PatternScanner(source, settings.analysis, settings.scan)

    app.include_router(routes.router, prefix="/api")
    return app
