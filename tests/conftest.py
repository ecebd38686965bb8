"""
Shared fixtures: an in-memory provider and payload builders.
"""

import random
from datetime import date, timedelta

import pytest

from stockwhisperer.forecast.service import ForecastService
from stockwhisperer.market.providers.base import MarketDataProvider
from stockwhisperer.market.schemas import PricePoint
from stockwhisperer.market.service import MarketDataService
from stockwhisperer.market.symbols import SymbolResolver
from stockwhisperer.market.synthetic import SyntheticSeriesGenerator

TODAY = date(2024, 6, 14)  # a Friday


class FakeProvider(MarketDataProvider):
    """Answers from per-symbol tables; an exception value is raised instead of returned."""

    def __init__(self, series=None, overview=None, news=None):
        self.series = series or {}
        self.overview = overview or {}
        self.news = news or {}
        self.calls: list[tuple[str, str]] = []

    async def get_daily_series(self, symbol: str) -> dict:
        self.calls.append(("TIME_SERIES_DAILY", symbol))
        return self._answer(self.series, symbol)

    async def get_company_overview(self, symbol: str) -> dict:
        self.calls.append(("OVERVIEW", symbol))
        return self._answer(self.overview, symbol)

    async def get_news(self, ticker: str) -> dict:
        self.calls.append(("NEWS_SENTIMENT", ticker))
        return self._answer(self.news, ticker)

    def series_calls(self) -> list[str]:
        return [symbol for function, symbol in self.calls if function == "TIME_SERIES_DAILY"]

    @staticmethod
    def _answer(table: dict, key: str):
        value = table.get(key, {})
        if isinstance(value, BaseException):
            raise value
        return value


def weekdays_back(end: date, count: int) -> list[date]:
    """``count`` weekdays ending at ``end``, ascending."""
    days: list[date] = []
    day = end
    while len(days) < count:
        if day.weekday() < 5:
            days.append(day)
        day -= timedelta(days=1)
    return list(reversed(days))


def daily_payload(closes: list[float], end: date = TODAY, symbol: str = "TEST") -> dict:
    """A TIME_SERIES_DAILY payload, newest first as the provider sends it."""
    dates = weekdays_back(end, len(closes))
    records = {
        d.isoformat(): {
            "1. open": f"{c:.4f}",
            "2. high": f"{c * 1.01:.4f}",
            "3. low": f"{c * 0.99:.4f}",
            "4. close": f"{c:.4f}",
            "5. volume": str(1_000_000 + i),
        }
        for i, (d, c) in enumerate(zip(dates, closes, strict=True))
    }
    return {
        "Meta Data": {"2. Symbol": symbol, "3. Last Refreshed": dates[-1].isoformat()},
        "Time Series (Daily)": dict(reversed(list(records.items()))),
    }


def make_points(closes: list[float], end: date = TODAY) -> list[PricePoint]:
    return [
        PricePoint(date=d, open=c, high=c, low=c, close=c, volume=1_000)
        for d, c in zip(weekdays_back(end, len(closes)), closes, strict=True)
    ]


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def market(provider, rng) -> MarketDataService:
    resolver = SymbolResolver()
    return MarketDataService(
        provider,
        resolver=resolver,
        generator=SyntheticSeriesGenerator(resolver.hints, rng),
        stale_after_days=90,
        synthetic_days=365,
        news_limit=3,
        today=lambda: TODAY,
    )


@pytest.fixture
def forecaster(rng) -> ForecastService:
    return ForecastService(rng)
