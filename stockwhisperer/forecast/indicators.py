"""Technical indicators over the trailing window of a price series."""

import math
from collections.abc import Sequence

from stockwhisperer.forecast.schemas import IndicatorSnapshot
from stockwhisperer.market.schemas import PricePoint

WINDOW_SIZE = 30
SMA_SHORT_PERIOD = 5
SMA_LONG_PERIOD = 20
MOMENTUM_SHORT_DAYS = 7
MOMENTUM_LONG_DAYS = 14


def trailing_window(series: Sequence[PricePoint], size: int = WINDOW_SIZE) -> list[PricePoint]:
    return list(series[-size:])


def sma(series: Sequence[PricePoint], period: int) -> float:
    """Mean of the ``period`` most recent closes, or 0.0 when there are fewer points.

    The 0.0 is an "insufficient data" sentinel, never a price.
    """
    if period <= 0 or len(series) < period:
        return 0.0
    closes = [p.close for p in series[-period:]]
    return sum(closes) / period


def momentum(series: Sequence[PricePoint], lookback_days: int) -> float:
    """Fractional change from the close ``lookback_days`` sessions back to the latest close.

    The base index is clamped to the first point when the history is shorter
    than the lookback.
    """
    if not series:
        return 0.0
    latest = series[-1].close
    base = series[max(len(series) - 1 - lookback_days, 0)].close
    return (latest - base) / base


def volatility(series: Sequence[PricePoint]) -> float:
    """Standard deviation (population form) of day-over-day fractional returns."""
    if len(series) < 2:
        return 0.0
    returns = [
        (series[i].close - series[i - 1].close) / series[i - 1].close
        for i in range(1, len(series))
    ]
    mean = sum(returns) / len(returns)
    variance = sum((r - mean) ** 2 for r in returns) / len(returns)
    return math.sqrt(variance)


def compute_snapshot(series: Sequence[PricePoint]) -> IndicatorSnapshot:
    window = trailing_window(series)
    return IndicatorSnapshot(
        current_price=window[-1].close if window else 0.0,
        sma_short=sma(window, SMA_SHORT_PERIOD),
        sma_long=sma(window, SMA_LONG_PERIOD),
        momentum_short=momentum(window, MOMENTUM_SHORT_DAYS),
        momentum_long=momentum(window, MOMENTUM_LONG_DAYS),
        volatility=volatility(window),
        window_size=len(window),
    )
