from abc import ABC, abstractmethod


class MarketDataProvider(ABC):
    """Transport port for the upstream market-data endpoint.

    Implementations return the decoded payload as-is and raise
    ``UpstreamError`` for transport failures; interpreting the payload is the
    market service's job.
    """

    @abstractmethod
    async def get_daily_series(self, symbol: str) -> dict: ...

    @abstractmethod
    async def get_company_overview(self, symbol: str) -> dict: ...

    @abstractmethod
    async def get_news(self, ticker: str) -> dict: ...
