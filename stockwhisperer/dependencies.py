import random
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from stockwhisperer.analysis.service import AnalysisService
from stockwhisperer.analysis.session import AnalysisSession, get_session
from stockwhisperer.config import settings
from stockwhisperer.forecast.service import ForecastService
from stockwhisperer.market.hints import DEFAULT_HINTS
from stockwhisperer.market.providers.alpha_vantage import AlphaVantageProvider
from stockwhisperer.market.service import MarketDataService
from stockwhisperer.market.symbols import SymbolResolver
from stockwhisperer.market.synthetic import SyntheticSeriesGenerator


@lru_cache
def get_rng() -> random.Random:
    return random.Random(settings.random_seed)


@lru_cache
def get_provider() -> AlphaVantageProvider:
    return AlphaVantageProvider()


def get_market_service() -> MarketDataService:
    resolver = SymbolResolver(DEFAULT_HINTS)
    return MarketDataService(
        get_provider(),
        resolver=resolver,
        generator=SyntheticSeriesGenerator(DEFAULT_HINTS, get_rng()),
    )


def get_forecast_service() -> ForecastService:
    return ForecastService(get_rng())


def get_analysis_service() -> AnalysisService:
    return AnalysisService(get_market_service(), get_forecast_service())


MarketServiceDep = Annotated[MarketDataService, Depends(get_market_service)]
AnalysisServiceDep = Annotated[AnalysisService, Depends(get_analysis_service)]
AnalysisSessionDep = Annotated[AnalysisSession, Depends(get_session)]
