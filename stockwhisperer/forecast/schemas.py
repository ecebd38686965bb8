from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Recommendation(StrEnum):
    strong_buy = "Strong Buy"
    buy = "Buy"
    hold = "Hold"
    sell = "Sell"
    strong_sell = "Strong Sell"


class Horizon(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    days: int = Field(ge=1)
    momentum_days: int = Field(ge=1)  # lookback used for this horizon's momentum signal


class IndicatorSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_price: float
    sma_short: float  # 0.0 when the window is too short
    sma_long: float
    momentum_short: float
    momentum_long: float
    volatility: float
    window_size: int


class Prediction(BaseModel):
    model_config = ConfigDict(frozen=True)

    timeframe: str
    horizon_days: int
    predicted_price: float
    confidence: float = Field(ge=0.30, le=0.95)
    recommendation: Recommendation
    reasoning: str
