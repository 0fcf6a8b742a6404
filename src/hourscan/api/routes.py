"""JSON API endpoints for patterns, RSI, price summary and multi-symbol scans.

Symbols are passed as a query parameter because ccxt unified symbols
contain a slash ("SOL/USDT"). Mining is CPU-bound and runs in a worker
thread so the event loop stays responsive.
"""

from __future__ import annotations

import asyncio

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from hourscan.analytics.summary import compute_price_summary
from hourscan.config import AppSettings
from hourscan.data.models import NormalizedPoint
from hourscan.data.normalizer import normalize
from hourscan.exceptions import CandleFetchError, InvalidInputError
from hourscan.patterns.miner import mine_patterns
from hourscan.patterns.scanner import PatternScanner, parse_target_day
from hourscan.signals.rsi import build_rsi_report

log = structlog.get_logger(__name__)

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _load_points(request: Request, symbol: str) -> list[NormalizedPoint]:
    settings: AppSettings = request.app.state.settings
    candles = await request.app.state.source.fetch_candles(symbol)
    return normalize(candles, tz=settings.analysis.timezone)


@router.get("/patterns")
async def get_patterns(
    request: Request,
    symbol: str,
    day: str | None = None,
    top_k: int | None = Query(None, ge=0),
) -> JSONResponse:
    """Top patterns for one symbol; ``day`` restricts buys to one day."""
    settings: AppSettings = request.app.state.settings
    try:
        target_day = parse_target_day(day, tz=settings.analysis.timezone) if day else None
    except ValueError as e:
        return _error(400, str(e))

    try:
        points = await _load_points(request, symbol)
    except CandleFetchError as e:
        log.warning("api_fetch_failed", symbol=symbol, error=str(e))
        return _error(502, str(e))
    except InvalidInputError as e:
        return _error(422, str(e))

    min_occurrences = (
        settings.analysis.min_occurrences
        if target_day is None
        else settings.analysis.day_min_occurrences
    )
    patterns = await asyncio.to_thread(
        mine_patterns,
        points,
        min_occurrences,
        target_day,
        top_k if top_k is not None else settings.analysis.top_k,
    )

    return JSONResponse(content={
        "symbol": symbol,
        "periods": len(points),
        "target_day": target_day.label if target_day is not None else None,
        "patterns": [p.to_dict(settings.analysis.recent_instances) for p in patterns],
    })


@router.get("/rsi")
async def get_rsi(request: Request, symbol: str) -> JSONResponse:
    """Current RSI, its band, and the trailing window of RSI points."""
    settings: AppSettings = request.app.state.settings
    try:
        points = await _load_points(request, symbol)
    except CandleFetchError as e:
        log.warning("api_fetch_failed", symbol=symbol, error=str(e))
        return _error(502, str(e))
    except InvalidInputError as e:
        return _error(422, str(e))

    report = build_rsi_report(
        points,
        period=settings.rsi.period,
        window=settings.rsi.window,
        overbought=settings.rsi.overbought,
        oversold=settings.rsi.oversold,
    )
    return JSONResponse(content={"symbol": symbol, **report.to_dict()})


@router.get("/summary")
async def get_summary(request: Request, symbol: str) -> JSONResponse:
    """Price summary (first/last/high/low/change) for one symbol."""
    try:
        points = await _load_points(request, symbol)
    except CandleFetchError as e:
        log.warning("api_fetch_failed", symbol=symbol, error=str(e))
        return _error(502, str(e))
    except InvalidInputError as e:
        return _error(422, str(e))

    summary = compute_price_summary(points)
    return JSONResponse(content={"symbol": symbol, **summary.to_dict()})


@router.get("/scan")
async def get_scan(request: Request, day: str | None = "today") -> JSONResponse:
    """Scan the watchlist for the target day and rank symbols by best ROI."""
    settings: AppSettings = request.app.state.settings
    try:
        target_day = parse_target_day(day, tz=settings.analysis.timezone) if day else None
    except ValueError as e:
        return _error(400, str(e))

    scanner: PatternScanner = request.app.state.scanner
    result = await scanner.scan(request.app.state.watchlist, target_day=target_day)
    return JSONResponse(content=result.to_dict(settings.analysis.recent_instances))
