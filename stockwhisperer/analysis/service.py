import asyncio
from datetime import UTC, datetime

import structlog

from stockwhisperer.analysis.schemas import Advisory, AnalysisResult
from stockwhisperer.forecast.indicators import compute_snapshot
from stockwhisperer.forecast.service import ForecastService
from stockwhisperer.market.schemas import CompanyProfile, NewsItem, SeriesResult
from stockwhisperer.market.service import MarketDataService
from stockwhisperer.market.symbols import normalize_symbol

logger = structlog.get_logger()


def _advisories(series: SeriesResult) -> tuple[Advisory, ...]:
    advisories = []
    if series.is_synthetic:
        advisories.append(Advisory.synthetic_data)
    if series.is_stale:
        advisories.append(Advisory.stale_data)
    return tuple(advisories)


class AnalysisService:
    def __init__(self, market: MarketDataService, forecaster: ForecastService) -> None:
        self._market = market
        self._forecaster = forecaster

    async def analyze(self, query: str) -> AnalysisResult:
        """Acquire series, profile and news concurrently, then forecast."""
        symbol = normalize_symbol(query)
        candidates = self._market.resolver.resolve(symbol)
        logger.info("analysis_started", query=query, candidates=candidates)

        series, profile, news = await asyncio.gather(
            self._market.acquire_series(candidates),
            self._market.fetch_profile(candidates[0]),
            self._market.fetch_news(candidates[0]),
        )
        if profile.is_fallback and series.symbol != candidates[0]:
            # the series came from a later candidate; describe that listing instead
            logger.info(
                "analysis_profile_refetch", requested=candidates[0], resolved=series.symbol
            )
            profile = await self._market.fetch_profile(series.symbol)
        return self._assemble(symbol, candidates, series, profile, news)

    async def demo(self, query: str, days: int | None = None) -> AnalysisResult:
        """Same result shape from a synthetic series, without touching the provider."""
        symbol = normalize_symbol(query)
        candidates = self._market.resolver.resolve(symbol)
        series = self._market.synthetic_series(candidates[0], days)
        profile = self._market.fallback_profile(candidates[0])
        logger.info("analysis_demo", query=query, points=len(series.points))
        news = [self._market.news_placeholder(candidates[0])]
        return self._assemble(symbol, candidates, series, profile, news)

    def _assemble(
        self,
        query: str,
        candidates: list[str],
        series: SeriesResult,
        profile: CompanyProfile,
        news: list[NewsItem],
    ) -> AnalysisResult:
        predictions = self._forecaster.forecast(series.points)
        advisories = _advisories(series)
        for advisory in advisories:
            logger.warning("analysis_advisory", symbol=series.symbol, advisory=advisory.value)

        result = AnalysisResult(
            query=query,
            symbol=series.symbol,
            candidates=tuple(candidates),
            series=series,
            profile=profile,
            news=tuple(news),
            metrics=self._market.build_metrics(series, profile),
            indicators=compute_snapshot(series.points),
            predictions=tuple(predictions),
            advisories=advisories,
            generated_at=datetime.now(UTC),
        )
        logger.info(
            "analysis_completed",
            symbol=result.symbol,
            source=series.source.value,
            points=len(series.points),
        )
        return result
