"""Symbol resolution: raw search string -> ordered exchange-qualified candidates.

Pure functions of the input string and the injected hint table; no I/O.
"""

import re

from stockwhisperer.exceptions import ValidationError
from stockwhisperer.market.hints import DEFAULT_HINTS, ExchangeFamily, MarketHints
from stockwhisperer.market.schemas import SymbolClassification

_FOREIGN_PATTERN = re.compile(r"^[A-Z&]{2,}$")


def normalize_symbol(raw: str) -> str:
    symbol = (raw or "").strip().upper()
    if not symbol:
        raise ValidationError("symbol must be a non-empty string")
    return symbol


def split_symbol(symbol: str) -> tuple[str, str | None]:
    """Split ``BASE.SUFFIX`` into its parts; the suffix is None when absent."""
    base, sep, suffix = symbol.rpartition(".")
    if not sep or not base:
        return symbol, None
    return base, suffix


def is_likely_foreign(symbol: str, hints: MarketHints = DEFAULT_HINTS) -> bool:
    """Policy: an unqualified symbol that probably lists on the default foreign market.

    Alphabetic (``&`` allowed, as in ``M&M``), at least two characters, no
    separator, and not one of the known domestic large-caps.
    """
    return bool(_FOREIGN_PATTERN.match(symbol)) and symbol not in hints.domestic_tickers


class SymbolResolver:
    def __init__(self, hints: MarketHints = DEFAULT_HINTS) -> None:
        self._hints = hints

    @property
    def hints(self) -> MarketHints:
        return self._hints

    def classify(self, raw: str) -> SymbolClassification:
        symbol = normalize_symbol(raw)
        base, suffix = split_symbol(symbol)
        family = self._hints.family_for_suffix(suffix)
        if family is not None:
            return SymbolClassification(
                symbol=symbol, base=base, suffix=suffix, market=family.market
            )
        return SymbolClassification(
            symbol=symbol,
            base=base,
            suffix=suffix,
            likely_foreign=is_likely_foreign(symbol, self._hints),
        )

    def sibling(self, raw: str) -> str | None:
        """Swap exchange A for exchange B within the same national market."""
        classification = self.classify(raw)
        family = self._hints.family_for_suffix(classification.suffix)
        if family is None:
            return None
        other = family.sibling(classification.suffix)
        return f"{classification.base}.{other}" if other else None

    def resolve(self, raw: str) -> list[str]:
        """Return candidates in the order they should be attempted, most likely first."""
        classification = self.classify(raw)
        candidates = [classification.symbol]

        if classification.market is not None:
            sibling = self.sibling(classification.symbol)
            if sibling:
                candidates.append(sibling)
        elif classification.likely_foreign:
            candidates.append(f"{classification.symbol}.{self._hints.default_foreign_suffix}")

        return candidates

    def family_of(self, symbol: str) -> ExchangeFamily | None:
        return self._hints.family_for_suffix(split_symbol(symbol)[1])
