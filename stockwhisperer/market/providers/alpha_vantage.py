import asyncio

import requests
import structlog

from stockwhisperer.config import settings
from stockwhisperer.exceptions import UpstreamError
from stockwhisperer.market.providers.base import MarketDataProvider

logger = structlog.get_logger()


def _query(session: requests.Session, url: str, params: dict, timeout: float) -> dict:
    """Issue one blocking GET and decode the JSON body (to be run in a thread)."""
    function = params.get("function", "")
    symbol = params.get("symbol") or params.get("tickers", "")
    try:
        response = session.get(url, params=params, timeout=timeout)
    except requests.RequestException as exc:
        raise UpstreamError(function, symbol, f"request failed: {exc}") from exc

    if response.status_code != 200:
        raise UpstreamError(function, symbol, f"HTTP {response.status_code}")

    try:
        data = response.json()
    except ValueError as exc:
        raise UpstreamError(function, symbol, "response is not JSON") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise UpstreamError(function, symbol, f"unexpected payload type {type(data).__name__}")
    return data


class AlphaVantageProvider(MarketDataProvider):
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._api_key = api_key or settings.alpha_vantage_api_key
        self._base_url = base_url or settings.alpha_vantage_base_url
        self._timeout = timeout or settings.request_timeout_seconds
        self._session = session or requests.Session()

    async def get_daily_series(self, symbol: str) -> dict:
        return await self._call(
            {"function": "TIME_SERIES_DAILY", "symbol": symbol, "outputsize": "full"}
        )

    async def get_company_overview(self, symbol: str) -> dict:
        return await self._call({"function": "OVERVIEW", "symbol": symbol})

    async def get_news(self, ticker: str) -> dict:
        return await self._call({"function": "NEWS_SENTIMENT", "tickers": ticker})

    async def _call(self, params: dict) -> dict:
        params = {**params, "apikey": self._api_key}
        function = params["function"]
        symbol = params.get("symbol") or params.get("tickers", "")
        logger.debug("alpha_vantage_request", function=function, symbol=symbol)
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(_query, self._session, self._base_url, params, self._timeout),
                timeout=self._timeout,
            )
        except TimeoutError as exc:
            raise UpstreamError(function, symbol, f"timed out after {self._timeout}s") from exc

    def close(self) -> None:
        self._session.close()
