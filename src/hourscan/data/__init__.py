"""Hourly candle data layer.

Provides candle and bucket models, the normalizer that places candles in
day/hour buckets, and the paginated exchange fetch pipeline.
"""

from hourscan.data.fetcher import CandleFetcher, CandleSource
from hourscan.data.models import Candle, DayHourKey, DayOfWeek, NormalizedPoint, all_keys
from hourscan.data.normalizer import normalize, prices

__all__ = [
    "Candle",
    "CandleFetcher",
    "CandleSource",
    "DayHourKey",
    "DayOfWeek",
    "NormalizedPoint",
    "all_keys",
    "normalize",
    "prices",
]
