"""Day/hour buy→sell pattern mining.

Evaluates every ordered (buy bucket, sell bucket) pair over the 168
day-of-week/hour-of-day buckets against a normalized hourly series.

Pairing rule: each point in the buy bucket is paired with the FIRST later
point in the sell bucket, and only that one. The pair is recorded when the
sell close is higher; otherwise that buy occurrence contributes nothing for
this bucket pair (a later sell match is never tried). Selling on the buy
day at or before the buy hour is excluded.

Points are indexed by bucket once, and the first forward match is found with
bisect, so a full run costs O(n * 168 * log n) instead of O(n^2 * 168^2).

Ranking: occurrence count desc, then average profit desc. The sort is stable
over the canonical enumeration (buy day, buy hour, sell day, sell hour), which
breaks remaining ties deterministically.
"""

from __future__ import annotations

import time
from bisect import bisect_right
from collections.abc import Sequence

from hourscan.data.models import HOURS_PER_DAY, DayHourKey, DayOfWeek, NormalizedPoint, all_keys
from hourscan.logging import get_logger
from hourscan.patterns.models import AnalysisRun, Pattern, TradeInstance

logger = get_logger(__name__)

DEFAULT_MIN_OCCURRENCES = 3
DEFAULT_DAY_MIN_OCCURRENCES = 2
DEFAULT_TOP_K = 5


def is_forward_pair(buy_key: DayHourKey, sell_key: DayHourKey) -> bool:
    """False for same-day sells at or before the buy hour."""
    return not (buy_key.day == sell_key.day and sell_key.hour <= buy_key.hour)


def _index_by_bucket(points: Sequence[NormalizedPoint]) -> list[list[int]]:
    """Positions of the points in each bucket, ascending, keyed by DayHourKey.index."""
    buckets: list[list[int]] = [[] for _ in range(7 * HOURS_PER_DAY)]
    for pos, point in enumerate(points):
        buckets[point.day * HOURS_PER_DAY + point.hour].append(pos)
    return buckets


def _pair_instances(
    points: Sequence[NormalizedPoint],
    buy_positions: list[int],
    sell_positions: list[int],
) -> list[TradeInstance]:
    instances: list[TradeInstance] = []
    for i in buy_positions:
        k = bisect_right(sell_positions, i)
        if k == len(sell_positions):
            # Later buys are further right, so none of them has a match either
            break
        j = sell_positions[k]
        buy = points[i]
        sell = points[j]
        if sell.close > buy.close:
            instances.append(
                TradeInstance(
                    buy_index=buy.index,
                    sell_index=sell.index,
                    buy_price=buy.close,
                    sell_price=sell.close,
                    profit=sell.close - buy.close,
                    buy_timestamp_ms=buy.timestamp_ms,
                    sell_timestamp_ms=sell.timestamp_ms,
                )
            )
    return instances


def rank_patterns(patterns: list[Pattern], top_k: int | None = DEFAULT_TOP_K) -> list[Pattern]:
    """Sort by (occurrence_count desc, average_profit desc) and truncate.

    Python's sort is stable with ``reverse=True``, so equal keys keep the
    order they were given in.
    """
    ranked = sorted(
        patterns,
        key=lambda p: (p.occurrence_count, p.average_profit),
        reverse=True,
    )
    if top_k is not None:
        ranked = ranked[:top_k]
    return ranked


def mine_patterns(
    points: Sequence[NormalizedPoint],
    min_occurrences: int = DEFAULT_MIN_OCCURRENCES,
    restrict_buy_day: DayOfWeek | None = None,
    top_k: int | None = DEFAULT_TOP_K,
    run: AnalysisRun | None = None,
) -> list[Pattern]:
    """Find the most consistently profitable buy→sell bucket pairs.

    One buy bucket is one unit of work. Before each unit the run's
    cancellation flag is checked; after it the progress callback fires with
    a label naming the day being processed.

    Args:
        points: Normalized hourly series ordered oldest first.
        min_occurrences: Minimum profitable instances for a pattern to count.
        restrict_buy_day: Only consider buy buckets on this day (24 units
            instead of 168).
        top_k: Number of patterns to return after ranking (None = all).
        run: Progress/cancellation handle. A fresh one is used if omitted.

    Returns:
        Ranked patterns. Empty when the series has fewer than two points or
        nothing meets ``min_occurrences``.

    Raises:
        AnalysisCancelledError: If the run is cancelled mid-analysis. No
            partial result is returned.
        ValueError: If ``min_occurrences`` < 1 or ``top_k`` < 0.
    """
    if min_occurrences < 1:
        raise ValueError(f"min_occurrences must be >= 1, got {min_occurrences}")
    if top_k is not None and top_k < 0:
        raise ValueError(f"top_k must be >= 0, got {top_k}")

    if run is None:
        run = AnalysisRun()

    buy_keys = list(all_keys(restrict_buy_day))
    sell_keys = list(all_keys())
    run.start(len(buy_keys))

    if len(points) < 2:
        logger.debug("mining_skipped_insufficient_points", points=len(points))
        return []

    start_time = time.monotonic()
    buckets = _index_by_bucket(points)
    candidates: list[Pattern] = []
    pairs_evaluated = 0

    for buy_key in buy_keys:
        run.raise_if_cancelled()

        buy_positions = buckets[buy_key.index]
        # A bucket with fewer buys than the threshold cannot produce a pattern
        if len(buy_positions) >= min_occurrences:
            for sell_key in sell_keys:
                if not is_forward_pair(buy_key, sell_key):
                    continue
                pairs_evaluated += 1
                instances = _pair_instances(points, buy_positions, buckets[sell_key.index])
                if len(instances) >= min_occurrences:
                    candidates.append(
                        Pattern(
                            buy_key=buy_key,
                            sell_key=sell_key,
                            instances=tuple(instances),
                        )
                    )

        run.advance(f"Analyzing {buy_key.day.label}...")

    ranked = rank_patterns(candidates, top_k)

    logger.info(
        "mining_complete",
        points=len(points),
        restrict_buy_day=restrict_buy_day.label if restrict_buy_day is not None else None,
        min_occurrences=min_occurrences,
        pairs_evaluated=pairs_evaluated,
        eligible_patterns=len(candidates),
        returned=len(ranked),
        elapsed_seconds=round(time.monotonic() - start_time, 3),
    )
    return ranked


def find_patterns_for_day(
    points: Sequence[NormalizedPoint],
    day: DayOfWeek,
    min_occurrences: int = DEFAULT_DAY_MIN_OCCURRENCES,
    top_k: int | None = DEFAULT_TOP_K,
    run: AnalysisRun | None = None,
) -> list[Pattern]:
    """Mine only patterns that buy on ``day`` (lower default threshold of 2)."""
    return mine_patterns(
        points,
        min_occurrences=min_occurrences,
        restrict_buy_day=day,
        top_k=top_k,
        run=run,
    )
