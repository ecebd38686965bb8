"""Resilient market-data acquisition.

Price series are fetched by walking the resolver's candidate list in order and
fall back to a synthetic series when every candidate fails. Company overview
and news have their own, shorter fallbacks. None of the public fetch methods
raise for "no data".
"""

import math
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta

import structlog

from stockwhisperer.config import settings
from stockwhisperer.exceptions import UpstreamError, ValidationError
from stockwhisperer.market.providers.base import MarketDataProvider
from stockwhisperer.market.schemas import (
    CompanyProfile,
    DataSource,
    Metrics,
    NewsItem,
    PricePoint,
    SeriesResult,
)
from stockwhisperer.market.symbols import SymbolResolver, split_symbol
from stockwhisperer.market.synthetic import SyntheticSeriesGenerator

logger = structlog.get_logger()

SERIES_KEY = "Time Series (Daily)"
SENTINEL_KEYS = ("Error Message", "Information", "Note")

_OHLCV_FIELDS = {
    "open": "1. open",
    "high": "2. high",
    "low": "3. low",
    "close": "4. close",
    "volume": "5. volume",
}
_MISSING_VALUES = {"", "none", "-", "null", "n/a"}
_NEWS_TIME_FORMATS = ("%Y%m%dT%H%M%S", "%Y%m%dT%H%M")
_NOT_AVAILABLE = "Not available"
_TRAILING_YEAR = timedelta(days=365)


def find_sentinel(payload: dict) -> str | None:
    """Return the provider error/rate-limit key present in *payload*, if any."""
    for key in SENTINEL_KEYS:
        if key in payload:
            return key
    return None


def check_payload(payload: object, function: str, symbol: str) -> dict:
    if not isinstance(payload, dict) or not payload:
        raise UpstreamError(function, symbol, "empty payload")
    sentinel = find_sentinel(payload)
    if sentinel:
        raise UpstreamError(function, symbol, f"provider returned '{sentinel}': {payload[sentinel]}")
    return payload


def parse_daily_series(payload: dict, symbol: str) -> tuple[PricePoint, ...]:
    """Parse a TIME_SERIES_DAILY payload into date-ascending price points."""
    check_payload(payload, "TIME_SERIES_DAILY", symbol)
    records = payload.get(SERIES_KEY)
    if not isinstance(records, dict) or not records:
        raise UpstreamError("TIME_SERIES_DAILY", symbol, f"'{SERIES_KEY}' missing or empty")

    by_date: dict[date, PricePoint] = {}
    for raw_date, values in records.items():
        try:
            point = PricePoint(
                date=date.fromisoformat(raw_date),
                open=float(values[_OHLCV_FIELDS["open"]]),
                high=float(values[_OHLCV_FIELDS["high"]]),
                low=float(values[_OHLCV_FIELDS["low"]]),
                close=float(values[_OHLCV_FIELDS["close"]]),
                volume=int(float(values[_OHLCV_FIELDS["volume"]])),
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("series_record_skipped", symbol=symbol, date=raw_date, reason=str(exc))
            continue
        by_date[point.date] = point

    if not by_date:
        raise UpstreamError("TIME_SERIES_DAILY", symbol, "no valid daily records")
    return tuple(sorted(by_date.values(), key=lambda p: p.date))


def _text(data: dict, key: str, default: str) -> str:
    value = data.get(key)
    if value is None or str(value).strip().lower() in _MISSING_VALUES:
        return default
    return str(value)


def _number(data: dict, key: str) -> float | None:
    value = data.get(key)
    if value is None or str(value).strip().lower() in _MISSING_VALUES:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _parse_published(raw: object) -> datetime:
    for fmt in _NEWS_TIME_FORMATS:
        try:
            return datetime.strptime(str(raw), fmt).replace(tzinfo=UTC)
        except ValueError:
            continue
    return datetime.now(UTC)


class MarketDataService:
    def __init__(
        self,
        provider: MarketDataProvider,
        resolver: SymbolResolver | None = None,
        generator: SyntheticSeriesGenerator | None = None,
        stale_after_days: int | None = None,
        synthetic_days: int | None = None,
        news_limit: int | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._provider = provider
        self._resolver = resolver or SymbolResolver()
        self._generator = generator or SyntheticSeriesGenerator(self._resolver.hints)
        self._stale_after = timedelta(days=stale_after_days or settings.stale_after_days)
        self._synthetic_days = synthetic_days or settings.synthetic_days
        self._news_limit = news_limit or settings.news_limit
        self._today = today

    @property
    def resolver(self) -> SymbolResolver:
        return self._resolver

    # -- price series ---------------------------------------------------

    async def fetch_series(self, candidates: list[str]) -> SeriesResult:
        """Try each candidate in order; synthesize when all of them fail.

        Classified failures (transport errors, timeouts, empty or sentinel
        payloads, missing series) advance to the next candidate. Anything
        else propagates; see ``acquire_series``.
        """
        if not candidates:
            raise ValidationError("at least one candidate symbol is required")

        for attempt, symbol in enumerate(candidates, start=1):
            try:
                payload = await self._provider.get_daily_series(symbol)
                points = parse_daily_series(payload, symbol)
            except (UpstreamError, TimeoutError) as exc:
                logger.warning(
                    "series_candidate_failed",
                    symbol=symbol,
                    attempt=attempt,
                    candidates=len(candidates),
                    reason=getattr(exc, "reason", "timed out"),
                )
                continue

            logger.info("series_fetched", symbol=symbol, attempt=attempt, points=len(points))
            return self._finalize(symbol, DataSource.alpha_vantage, points)

        logger.warning("series_using_synthetic", candidates=candidates)
        return self.synthetic_series(candidates[0])

    async def acquire_series(self, candidates: list[str]) -> SeriesResult:
        """``fetch_series`` that also turns unclassified errors into a synthetic series."""
        if not candidates:
            raise ValidationError("at least one candidate symbol is required")
        try:
            return await self.fetch_series(candidates)
        except Exception as exc:
            logger.error("series_fetch_unexpected_error", candidates=candidates, error=repr(exc))
            return self.synthetic_series(candidates[0])

    def synthetic_series(self, symbol: str, days: int | None = None) -> SeriesResult:
        points = self._generator.generate(symbol, days or self._synthetic_days, today=self._today())
        return self._finalize(symbol, DataSource.synthetic, points)

    def _finalize(
        self, symbol: str, source: DataSource, points: tuple[PricePoint, ...]
    ) -> SeriesResult:
        latest = points[-1].date if points else None
        is_stale = latest is not None and latest < self._today() - self._stale_after
        if is_stale:
            logger.warning(
                "series_stale",
                symbol=symbol,
                latest_date=latest.isoformat(),
                threshold_days=self._stale_after.days,
            )
        return SeriesResult(symbol=symbol, source=source, points=points, is_stale=is_stale)

    # -- company overview -----------------------------------------------

    async def fetch_profile(self, symbol: str) -> CompanyProfile:
        try:
            payload = check_payload(
                await self._provider.get_company_overview(symbol), "OVERVIEW", symbol
            )
            profile = self._build_profile(symbol, payload)
        except UpstreamError as exc:
            logger.warning("profile_fallback", symbol=symbol, reason=exc.reason)
            return self.fallback_profile(symbol)
        except Exception as exc:
            logger.error("profile_fetch_unexpected_error", symbol=symbol, error=repr(exc))
            return self.fallback_profile(symbol)

        logger.info("profile_fetched", symbol=symbol)
        return profile

    def fallback_profile(self, symbol: str) -> CompanyProfile:
        hints = self._resolver.hints
        base, _ = split_symbol(symbol)
        family = self._resolver.family_of(symbol)
        name = next(
            (label for marker, label in hints.company_names.items() if marker in symbol),
            base,
        )
        sector = family.sector_label if family else _NOT_AVAILABLE
        return CompanyProfile(
            symbol=symbol,
            name=name,
            description=f"Information not available for {name}",
            industry=sector,
            sector=sector,
            exchange=self._derive_exchange(symbol),
            is_fallback=True,
        )

    def _build_profile(self, symbol: str, data: dict) -> CompanyProfile:
        resolved = _text(data, "Symbol", symbol)
        employees = _number(data, "FullTimeEmployees")
        return CompanyProfile(
            symbol=resolved,
            name=_text(data, "Name", resolved),
            description=_text(data, "Description", f"No description available for {resolved}"),
            industry=_text(data, "Industry", _NOT_AVAILABLE),
            sector=_text(data, "Sector", _NOT_AVAILABLE),
            employees=int(employees) if employees else 0,
            ceo=_text(data, "CEO", _NOT_AVAILABLE),
            website=_text(data, "Address", _NOT_AVAILABLE),
            exchange=_text(data, "Exchange", self._derive_exchange(symbol)),
            market_cap=_number(data, "MarketCapitalization"),
            pe_ratio=_number(data, "PERatio"),
            dividend_yield=_number(data, "DividendYield"),
            week_52_high=_number(data, "52WeekHigh"),
            week_52_low=_number(data, "52WeekLow"),
        )

    def _derive_exchange(self, symbol: str) -> str:
        family = self._resolver.family_of(symbol)
        if family is not None:
            return family.exchange_names.get(split_symbol(symbol)[1], family.market)
        if symbol in self._resolver.hints.domestic_tickers:
            return self._resolver.hints.domestic_exchange
        return "UNKNOWN"

    # -- news -----------------------------------------------------------

    async def fetch_news(self, symbol: str) -> list[NewsItem]:
        """Latest articles for *symbol*; a single placeholder item when there are none."""
        ticker, _ = split_symbol(symbol)
        try:
            payload = await self._provider.get_news(ticker)
        except UpstreamError as exc:
            logger.warning("news_fetch_failed", symbol=symbol, reason=exc.reason)
            return [self.news_placeholder(symbol, failed=True)]
        except Exception as exc:
            logger.error("news_fetch_unexpected_error", symbol=symbol, error=repr(exc))
            return [self.news_placeholder(symbol, failed=True)]

        if not isinstance(payload, dict) or find_sentinel(payload):
            logger.warning("news_unavailable", symbol=symbol)
            return [self.news_placeholder(symbol)]

        feed = payload.get("feed")
        if not isinstance(feed, list) or not feed:
            logger.warning("news_feed_empty", symbol=symbol)
            return [self.news_placeholder(symbol)]

        items: list[NewsItem] = []
        for article in feed[: self._news_limit]:
            try:
                items.append(
                    NewsItem(
                        title=article["title"],
                        published_at=_parse_published(article.get("time_published")),
                        source=article.get("source") or _NOT_AVAILABLE,
                        summary=article.get("summary") or "",
                        url=article.get("url") or "#",
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("news_item_skipped", symbol=symbol, reason=str(exc))

        if not items:
            return [self.news_placeholder(symbol)]
        logger.info("news_fetched", symbol=symbol, items=len(items))
        return items

    def news_placeholder(self, symbol: str, failed: bool = False) -> NewsItem:
        if failed:
            title = f"Could not retrieve news for {symbol}"
            summary = "There was an error fetching news for this stock. Please try again later."
        else:
            title = f"No recent news found for {symbol}"
            summary = "Try searching for news about this company on financial news sites."
        return NewsItem(
            title=title,
            published_at=datetime.now(UTC),
            source=settings.app_name,
            summary=summary,
            url="#",
        )

    # -- metrics --------------------------------------------------------

    def build_metrics(self, series: SeriesResult, profile: CompanyProfile | None) -> Metrics:
        """Key metrics from the overview, falling back to the series itself."""
        latest = series.latest
        if latest is None:
            return Metrics()

        cutoff = latest.date - _TRAILING_YEAR
        closes = [p.close for p in series.points if p.date >= cutoff]

        fundamentals = profile if profile is not None and not profile.is_fallback else None
        high = fundamentals.week_52_high if fundamentals else None
        low = fundamentals.week_52_low if fundamentals else None

        return Metrics(
            market_cap=(fundamentals.market_cap if fundamentals else None) or 0.0,
            pe_ratio=(fundamentals.pe_ratio if fundamentals else None) or 0.0,
            dividend_yield=((fundamentals.dividend_yield if fundamentals else None) or 0.0) * 100,
            week_52_high=high if high is not None else max(closes),
            week_52_low=low if low is not None else min(closes),
            volume=latest.volume,
        )
