"""Synthetic daily OHLCV series for demo mode and as the last-resort fallback."""

import random
from datetime import date, timedelta

import structlog

from stockwhisperer.market.hints import DEFAULT_HINTS, MarketHints
from stockwhisperer.market.schemas import PricePoint
from stockwhisperer.market.symbols import split_symbol

logger = structlog.get_logger()

_DAILY_MOVE_PCT = 1.0
_INTRADAY_SPREAD = 0.02
_VOLUME_RANGE = (500_000, 1_499_999)


class SyntheticSeriesGenerator:
    def __init__(self, hints: MarketHints = DEFAULT_HINTS, rng: random.Random | None = None) -> None:
        self._hints = hints
        self._rng = rng or random.Random()

    def base_price(self, symbol_hint: str) -> float:
        symbol = symbol_hint.upper()
        if any(marker in symbol for marker in self._hints.blue_chip_markers):
            return self._hints.blue_chip_base_price
        family = self._hints.family_for_suffix(split_symbol(symbol)[1])
        if family is not None:
            return family.base_price
        return self._hints.default_base_price

    def generate(self, symbol_hint: str, days: int, today: date | None = None) -> tuple[PricePoint, ...]:
        """Random-walk a series over the last ``days`` calendar days, weekdays only."""
        today = today or date.today()
        price = self.base_price(symbol_hint)
        points: list[PricePoint] = []

        for offset in range(days, -1, -1):
            day = today - timedelta(days=offset)
            if day.weekday() >= 5:
                continue

            change_pct = self._rng.uniform(-_DAILY_MOVE_PCT, _DAILY_MOVE_PCT)
            price *= 1 + change_pct / 100

            spread = price * _INTRADAY_SPREAD
            high = price + self._rng.random() * spread
            low = price - self._rng.random() * spread
            open_ = price - self._rng.random() * spread / 2

            points.append(
                PricePoint(
                    date=day,
                    open=round(open_, 2),
                    high=round(high, 2),
                    low=round(min(low, open_), 2),
                    close=round(price, 2),
                    volume=self._rng.randint(*_VOLUME_RANGE),
                )
            )

        logger.info("synthetic_series_generated", symbol=symbol_hint, days=days, points=len(points))
        return tuple(points)
