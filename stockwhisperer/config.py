from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "SW_", "env_file": ".env", "env_file_encoding": "utf-8"}

    app_name: str = Field(default="StockWhisperer")
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)
    cors_origins: str = Field(default="http://localhost:3000")

    alpha_vantage_api_key: str = Field(default="demo", min_length=1)
    alpha_vantage_base_url: str = Field(default="https://www.alphavantage.co/query")
    request_timeout_seconds: float = Field(default=10.0, gt=0)

    stale_after_days: int = Field(default=90, ge=1)
    synthetic_days: int = Field(default=365, ge=1)
    news_limit: int = Field(default=3, ge=1)
    random_seed: int | None = Field(default=None)


settings = Settings()
