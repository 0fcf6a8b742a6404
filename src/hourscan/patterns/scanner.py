"""Multi-symbol pattern scan.

Runs the pattern miner independently for every symbol of a watchlist:
fetch candles, normalize, mine, keep the best pattern(s). Symbols never share
state. Mining is CPU-bound, so each symbol is mined in a worker thread
(asyncio.to_thread) while fetches for other symbols proceed; an
asyncio.Semaphore bounds how many symbols are in flight.

Results are collected into per-symbol slots (asyncio.gather preserves input
order) and ranked only after every symbol has finished, so the outcome never
depends on completion order.

A symbol whose fetch, normalization or mining fails is recorded with its
error reason and the scan continues. Cancellation aborts the whole scan and
discards every per-symbol result.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Literal

from hourscan.config import AnalysisSettings, ScanSettings
from hourscan.data.models import DayOfWeek, NormalizedPoint
from hourscan.data.normalizer import normalize, resolve_timezone
from hourscan.exceptions import AnalysisCancelledError
from hourscan.logging import get_logger
from hourscan.patterns.miner import mine_patterns
from hourscan.patterns.models import AnalysisRun, Pattern

if TYPE_CHECKING:
    from hourscan.data.fetcher import CandleSource

logger = get_logger(__name__)


@dataclass(frozen=True)
class WatchlistEntry:
    """A symbol to scan and its display name."""

    symbol: str  # ccxt unified symbol, e.g. "SOL/USDT"
    name: str


DEFAULT_WATCHLIST: tuple[WatchlistEntry, ...] = tuple(
    WatchlistEntry(f"{base}/USDT", name)
    for base, name in [
        ("SOL", "Solana"),
        ("ETH", "Ethereum"),
        ("XRP", "XRP"),
        ("BTC", "Bitcoin"),
        ("BCH", "Bitcoin Cash"),
        ("LTC", "Litecoin"),
        ("XMR", "Monero"),
        ("DAI", "Dai"),
        ("AAVE", "Aave"),
        ("BNB", "Binance Coin"),
        ("TRX", "Tron"),
        ("XLM", "Stellar"),
        ("AVAX", "Avalanche"),
        ("OP", "Optimism"),
        ("DOGE", "Dogecoin"),
        ("LINK", "Chainlink"),
        ("ATOM", "Cosmos"),
        ("ADA", "Cardano"),
        ("SUI", "Sui"),
        ("INJ", "Injective"),
        ("GRT", "The Graph"),
        ("HBAR", "Hedera"),
        ("UNI", "Uniswap"),
        ("DOT", "Polkadot"),
        ("TON", "Toncoin"),
        ("TAO", "Bittensor"),
        ("ENA", "Ethena"),
        ("ONDO", "Ondo"),
        ("ICP", "Internet Computer"),
        ("APT", "Aptos"),
        ("POL", "Polygon"),
        ("ALGO", "Algorand"),
        ("PENGU", "Pudgy Penguins"),
    ]
)


def resolve_target_day(
    which: Literal["today", "tomorrow"],
    now: datetime | None = None,
    tz: str = "UTC",
) -> DayOfWeek:
    """Resolve "today"/"tomorrow" to a day of week in ``tz``.

    This is the only place the wall clock is read; pass ``now`` to pin it.
    """
    zone = resolve_timezone(tz)
    current = now.astimezone(zone) if now is not None else datetime.now(zone)
    if which == "tomorrow":
        current += timedelta(days=1)
    elif which != "today":
        raise ValueError(f"Expected 'today' or 'tomorrow', got {which!r}")
    return DayOfWeek.from_datetime(current)


def parse_target_day(value: str, now: datetime | None = None, tz: str = "UTC") -> DayOfWeek:
    """Accept "today", "tomorrow", or a day name such as "Mon"."""
    lowered = value.strip().lower()
    if lowered in ("today", "tomorrow"):
        return resolve_target_day(lowered, now=now, tz=tz)  # type: ignore[arg-type]
    return DayOfWeek.parse(value)


@dataclass
class SymbolAnalysis:
    """Outcome of mining one symbol. ``error`` is set when the symbol failed."""

    symbol: str
    name: str
    patterns: list[Pattern] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def best_pattern(self) -> Pattern | None:
        return self.patterns[0] if self.patterns else None

    @property
    def best_roi(self) -> Decimal:
        best = self.best_pattern
        return best.average_roi_percent if best is not None else Decimal("0")

    def to_dict(self, recent: int | None = 3) -> dict:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "patterns": [p.to_dict(recent) for p in self.patterns],
            "error": self.error,
        }


@dataclass
class ScanResult:
    """Scan outcome split into ranked, pattern-less and failed symbols.

    ``ranked`` is sorted by best-pattern ROI descending and capped; ``empty``
    and ``failed`` keep watchlist order.
    """

    target_day: DayOfWeek | None
    ranked: list[SymbolAnalysis] = field(default_factory=list)
    empty: list[SymbolAnalysis] = field(default_factory=list)
    failed: list[SymbolAnalysis] = field(default_factory=list)

    def all(self) -> list[SymbolAnalysis]:
        return [*self.ranked, *self.empty, *self.failed]

    def to_dict(self, recent: int | None = 3) -> dict:
        return {
            "target_day": self.target_day.label if self.target_day is not None else None,
            "ranked": [a.to_dict(recent) for a in self.ranked],
            "empty": [a.symbol for a in self.empty],
            "failed": {a.symbol: a.error for a in self.failed},
        }


def rank_symbols(
    analyses: Sequence[SymbolAnalysis],
    max_symbols: int | None = None,
) -> tuple[list[SymbolAnalysis], list[SymbolAnalysis], list[SymbolAnalysis]]:
    """Split analyses into (ranked, empty, failed).

    Ranked symbols are ordered by best-pattern ROI descending; the sort is
    stable so ties keep the given order.
    """
    failed = [a for a in analyses if a.failed]
    empty = [a for a in analyses if not a.failed and not a.patterns]
    with_patterns = [a for a in analyses if not a.failed and a.patterns]
    ranked = sorted(with_patterns, key=lambda a: a.best_roi, reverse=True)
    if max_symbols is not None:
        ranked = ranked[:max_symbols]
    return ranked, empty, failed


class PatternScanner:
    """Mines every symbol of a watchlist and ranks them by best-pattern ROI.

    Args:
        source: Candle source used to fetch each symbol's hourly history.
        analysis_settings: Mining thresholds and bucketing time zone.
        scan_settings: Per-symbol pattern count, symbol cap, concurrency.
    """

    def __init__(
        self,
        source: CandleSource,
        analysis_settings: AnalysisSettings | None = None,
        scan_settings: ScanSettings | None = None,
    ) -> None:
        self._source = source
        self._analysis = analysis_settings or AnalysisSettings()
        self._scan = scan_settings or ScanSettings()

    async def scan(
        self,
        watchlist: Sequence[WatchlistEntry] = DEFAULT_WATCHLIST,
        target_day: DayOfWeek | None = None,
        run: AnalysisRun | None = None,
    ) -> ScanResult:
        """Scan all symbols and return the ranked result.

        Args:
            watchlist: Symbols to analyse.
            target_day: Only mine patterns buying on this day (lower
                threshold). None mines the whole week.
            run: Progress/cancellation handle; progress advances once per
                finished symbol.

        Returns:
            ScanResult with ranked, empty and failed symbols.

        Raises:
            AnalysisCancelledError: If the run is cancelled.
        """
        if run is None:
            run = AnalysisRun()
        run.start(len(watchlist), "Starting scan...")

        start_time = time.monotonic()
        semaphore = asyncio.Semaphore(max(1, self._scan.max_concurrency))

        logger.info(
            "scan_starting",
            symbols=len(watchlist),
            target_day=target_day.label if target_day is not None else None,
            max_concurrency=self._scan.max_concurrency,
        )

        async def _guarded(entry: WatchlistEntry) -> SymbolAnalysis:
            async with semaphore:
                run.raise_if_cancelled()
                analysis = await self._analyze_symbol(entry, target_day, run)
            run.advance(f"Analyzed {entry.name} ({run.units_completed + 1}/{run.units_total})")
            return analysis

        tasks = [asyncio.create_task(_guarded(entry)) for entry in watchlist]
        try:
            analyses = await asyncio.gather(*tasks)
        except AnalysisCancelledError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("scan_cancelled", completed=run.units_completed, total=run.units_total)
            raise

        ranked, empty, failed = rank_symbols(analyses, self._scan.max_symbols)

        logger.info(
            "scan_complete",
            symbols=len(watchlist),
            ranked=len(ranked),
            empty=len(empty),
            failed=len(failed),
            elapsed_seconds=round(time.monotonic() - start_time, 2),
        )
        return ScanResult(target_day=target_day, ranked=ranked, empty=empty, failed=failed)

    async def _analyze_symbol(
        self,
        entry: WatchlistEntry,
        target_day: DayOfWeek | None,
        run: AnalysisRun,
    ) -> SymbolAnalysis:
        """Fetch, normalize and mine one symbol. Failures are recorded, not raised."""
        try:
            candles = await self._source.fetch_candles(entry.symbol)
            points = normalize(candles, tz=self._analysis.timezone)
            patterns = await asyncio.to_thread(self._mine, points, target_day, run.child())
        except AnalysisCancelledError:
            raise
        except Exception as e:
            logger.warning(
                "symbol_analysis_failed",
                symbol=entry.symbol,
                error=str(e),
                error_type=type(e).__name__,
            )
            return SymbolAnalysis(symbol=entry.symbol, name=entry.name, error=str(e) or type(e).__name__)

        logger.debug(
            "symbol_analyzed",
            symbol=entry.symbol,
            points=len(points),
            patterns=len(patterns),
        )
        return SymbolAnalysis(symbol=entry.symbol, name=entry.name, patterns=patterns)

    def _mine(
        self,
        points: list[NormalizedPoint],
        target_day: DayOfWeek | None,
        run: AnalysisRun,
    ) -> list[Pattern]:
        if target_day is None:
            min_occurrences = self._analysis.min_occurrences
        else:
            min_occurrences = self._analysis.day_min_occurrences
        return mine_patterns(
            points,
            min_occurrences=min_occurrences,
            restrict_buy_day=target_day,
            top_k=self._scan.patterns_per_symbol,
            run=run,
        )
