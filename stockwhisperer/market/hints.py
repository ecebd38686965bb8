"""Static market hint table shared by the symbol resolver and the synthetic generator.

The table is immutable and handed to its consumers at construction time, so a
test (or another deployment) can swap in its own exchanges and price anchors.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class ExchangeFamily:
    """A national market whose listings are qualified by a dot-suffix."""

    market: str
    suffixes: tuple[str, ...]
    exchange_names: Mapping[str, str]
    sector_label: str
    base_price: float

    def sibling(self, suffix: str) -> str | None:
        """Return the other exchange of a two-exchange market."""
        others = [s for s in self.suffixes if s != suffix]
        return others[0] if others else None


@dataclass(frozen=True)
class MarketHints:
    families: tuple[ExchangeFamily, ...]
    default_foreign_suffix: str
    domestic_tickers: frozenset[str]
    domestic_exchange: str
    blue_chip_markers: tuple[str, ...]
    blue_chip_base_price: float
    default_base_price: float
    company_names: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def family_for_suffix(self, suffix: str | None) -> ExchangeFamily | None:
        if not suffix:
            return None
        for family in self.families:
            if suffix in family.suffixes:
                return family
        return None


INDIA = ExchangeFamily(
    market="IN",
    suffixes=("NS", "BSE"),
    exchange_names=MappingProxyType({"NS": "NSE", "BSE": "BSE"}),
    sector_label="Indian Market",
    base_price=1500.0,
)

DEFAULT_HINTS = MarketHints(
    families=(INDIA,),
    default_foreign_suffix="NS",
    domestic_tickers=frozenset({"AAPL", "MSFT", "AMZN", "TSLA", "GOOGL", "FB", "NFLX"}),
    domestic_exchange="NASDAQ",
    blue_chip_markers=("RELIANCE", "TCS", "HDFC", "INFY"),
    blue_chip_base_price=2500.0,
    default_base_price=100.0,
    company_names=MappingProxyType(
        {
            "RELIANCE": "Reliance Industries",
            "TCS": "Tata Consultancy Services",
            "HDFC": "HDFC Bank",
            "INFY": "Infosys",
            "ICICI": "ICICI Bank",
        }
    ),
)
