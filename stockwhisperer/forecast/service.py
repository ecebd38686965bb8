"""Explainable multi-horizon price forecast.

A fixed heuristic over a handful of technical signals: price versus its 5 and
20 session averages, amplified recent momentum, and volatility-scaled noise.
"""

import random
from collections.abc import Sequence

import structlog

from stockwhisperer.forecast.indicators import (
    SMA_LONG_PERIOD,
    SMA_SHORT_PERIOD,
    momentum,
    sma,
    trailing_window,
    volatility,
)
from stockwhisperer.forecast.schemas import Horizon, Prediction, Recommendation
from stockwhisperer.market.schemas import PricePoint

logger = structlog.get_logger()

MIN_POINTS = 10
CONFIDENCE_BASE = 0.85
CONFIDENCE_FLOOR = 0.30
CONFIDENCE_CEILING = 0.95

SHORT_TREND_STEP = 0.01
LONG_TREND_STEP = 0.005
MOMENTUM_GAIN = 3

DEFAULT_HORIZONS: tuple[Horizon, ...] = (
    Horizon(label="Tomorrow", days=1, momentum_days=7),
    Horizon(label="Next Week", days=7, momentum_days=7),
    Horizon(label="Next Month", days=30, momentum_days=14),
)

_THRESHOLDS = (
    (5.0, Recommendation.strong_buy),
    (1.5, Recommendation.buy),
    (-1.5, Recommendation.hold),
    (-5.0, Recommendation.sell),
)

_REASONING = {
    Recommendation.strong_buy: (
        "Our analysis indicates a potential {pct:.1f}% increase in the {label} timeframe "
        "based on positive momentum and favorable technical indicators."
    ),
    Recommendation.buy: (
        "With a projected {pct:.1f}% rise, technical indicators suggest bullish movement "
        "in the {label} timeframe."
    ),
    Recommendation.hold: (
        "The stock shows mixed signals with a projected {pct:.1f}% change in the {label} "
        "timeframe, suggesting a neutral position is appropriate."
    ),
    Recommendation.sell: (
        "A projected {abs_pct:.1f}% decrease in the {label} timeframe based on negative "
        "technical indicators suggests reducing exposure."
    ),
    Recommendation.strong_sell: (
        "Our analysis forecasts a significant {abs_pct:.1f}% decline in the {label} timeframe "
        "due to negative momentum and bearish technical signals."
    ),
}

INSUFFICIENT_DATA_REASONING = "Insufficient data to make a prediction."


def classify(percent_change: float) -> Recommendation:
    for threshold, recommendation in _THRESHOLDS:
        if percent_change > threshold:
            return recommendation
    return Recommendation.strong_sell


def explain(recommendation: Recommendation, percent_change: float, label: str) -> str:
    return _REASONING[recommendation].format(
        pct=percent_change, abs_pct=abs(percent_change), label=label
    )


def confidence_for(horizon_days: int, vol: float) -> float:
    raw = CONFIDENCE_BASE - (horizon_days / 100 + vol * 5)
    return max(CONFIDENCE_FLOOR, min(CONFIDENCE_CEILING, raw))


def _trend(average: float, price: float, step: float) -> float:
    # average == 0.0 is the "not enough history" sentinel from sma()
    if average == 0.0:
        return 0.0
    return -step if average > price else step


class ForecastService:
    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def forecast(
        self,
        series: Sequence[PricePoint],
        horizons: Sequence[Horizon] = DEFAULT_HORIZONS,
    ) -> list[Prediction]:
        if len(series) < MIN_POINTS:
            logger.info("forecast_insufficient_data", points=len(series))
            current = series[-1].close if series else 0.0
            return [
                Prediction(
                    timeframe=h.label,
                    horizon_days=h.days,
                    predicted_price=current,
                    confidence=CONFIDENCE_FLOOR,
                    recommendation=Recommendation.hold,
                    reasoning=INSUFFICIENT_DATA_REASONING,
                )
                for h in horizons
            ]

        window = trailing_window(series)
        price = window[-1].close
        sma_short = sma(window, SMA_SHORT_PERIOD)
        sma_long = sma(window, SMA_LONG_PERIOD)
        vol = volatility(window)

        predictions = [
            self._predict(h, price, sma_short, sma_long, momentum(window, h.momentum_days), vol)
            for h in horizons
        ]
        logger.info(
            "forecast_generated",
            price=price,
            volatility=round(vol, 6),
            recommendations=[p.recommendation.value for p in predictions],
        )
        return predictions

    def _predict(
        self,
        horizon: Horizon,
        price: float,
        sma_short: float,
        sma_long: float,
        drift: float,
        vol: float,
    ) -> Prediction:
        days = horizon.days
        signal = (
            _trend(sma_short, price, SHORT_TREND_STEP)
            + _trend(sma_long, price, LONG_TREND_STEP)
            + drift * MOMENTUM_GAIN
        )
        base_change = signal * days

        uncertainty = 1 + days / 50
        volatility_effect = vol * days * 2
        noise = (self._rng.random() - 0.5) * volatility_effect * uncertainty

        predicted_price = round(price * (1 + base_change + noise), 2)
        percent_change = (predicted_price - price) / price * 100
        recommendation = classify(percent_change)

        return Prediction(
            timeframe=horizon.label,
            horizon_days=days,
            predicted_price=predicted_price,
            confidence=confidence_for(days, vol),
            recommendation=recommendation,
            reasoning=explain(recommendation, percent_change, horizon.label),
        )
