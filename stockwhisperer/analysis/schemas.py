from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from stockwhisperer.forecast.schemas import IndicatorSnapshot, Prediction
from stockwhisperer.market.schemas import CompanyProfile, Metrics, NewsItem, SeriesResult


class Advisory(StrEnum):
    stale_data = "stale_data"
    synthetic_data = "synthetic_data"


class AnalysisResult(BaseModel):
    """Everything one search produces; replaced as a whole, never patched."""

    model_config = ConfigDict(frozen=True)

    query: str
    symbol: str
    candidates: tuple[str, ...]
    series: SeriesResult
    profile: CompanyProfile
    news: tuple[NewsItem, ...]
    metrics: Metrics
    indicators: IndicatorSnapshot
    predictions: tuple[Prediction, ...]
    advisories: tuple[Advisory, ...] = ()
    generated_at: datetime


class SearchRequest(BaseModel):
    query: str
