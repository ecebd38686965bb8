from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class DataSource(StrEnum):
    alpha_vantage = "alpha_vantage"
    synthetic = "synthetic"


class PricePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: date
    open: float = Field(gt=0)
    high: float = Field(gt=0)
    low: float = Field(gt=0)
    close: float = Field(gt=0)
    volume: int = Field(ge=0)


class SeriesResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    source: DataSource
    points: tuple[PricePoint, ...]
    is_stale: bool = False

    @property
    def latest(self) -> PricePoint | None:
        return self.points[-1] if self.points else None

    @property
    def latest_date(self) -> date | None:
        return self.points[-1].date if self.points else None

    @property
    def is_synthetic(self) -> bool:
        return self.source == DataSource.synthetic


class SymbolClassification(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    base: str
    suffix: str | None = None
    market: str | None = None  # national market code, None when exchange-ambiguous
    likely_foreign: bool = False


class CompanyProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str
    description: str
    industry: str
    sector: str
    employees: int = 0
    ceo: str = "Not available"
    website: str = "Not available"
    exchange: str = "UNKNOWN"
    market_cap: float | None = None
    pe_ratio: float | None = None
    dividend_yield: float | None = None  # fraction, as reported upstream
    week_52_high: float | None = None
    week_52_low: float | None = None
    is_fallback: bool = False


class NewsItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    published_at: datetime
    source: str
    summary: str
    url: str


class Metrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    market_cap: float = 0.0
    pe_ratio: float = 0.0
    dividend_yield: float = 0.0  # percent
    week_52_high: float = 0.0
    week_52_low: float = 0.0
    volume: int = 0
