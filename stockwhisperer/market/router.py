from fastapi import APIRouter, Query

from stockwhisperer.dependencies import MarketServiceDep
from stockwhisperer.market.schemas import CompanyProfile, NewsItem, SeriesResult
from stockwhisperer.market.symbols import normalize_symbol

router = APIRouter()


@router.get("/candidates/{symbol}", response_model=list[str])
async def get_candidates(symbol: str, service: MarketServiceDep) -> list[str]:
    return service.resolver.resolve(symbol)


@router.get("/series/{symbol}", response_model=SeriesResult)
async def get_series(symbol: str, service: MarketServiceDep) -> SeriesResult:
    return await service.acquire_series(service.resolver.resolve(symbol))


@router.get("/profile/{symbol}", response_model=CompanyProfile)
async def get_profile(symbol: str, service: MarketServiceDep) -> CompanyProfile:
    return await service.fetch_profile(normalize_symbol(symbol))


@router.get("/news/{symbol}", response_model=list[NewsItem])
async def get_news(symbol: str, service: MarketServiceDep) -> list[NewsItem]:
    return await service.fetch_news(normalize_symbol(symbol))


@router.get("/demo/{symbol}", response_model=SeriesResult)
async def get_demo_series(
    symbol: str,
    service: MarketServiceDep,
    days: int = Query(default=365, ge=7, le=3650),
) -> SeriesResult:
    """Synthetic series only; never calls the provider."""
    return service.synthetic_series(normalize_symbol(symbol), days)
