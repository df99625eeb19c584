"""
Ticker symbol to CoinGecko coin ID resolution.

Symbols are ambiguous (many coins share "btc"-like tickers), so each one is
looked up through /search and the first candidate whose symbol matches
exactly, ignoring case, is taken. /search accepts a single query term, so
resolution costs one request per symbol.
"""

from api.coingecko import CoinGeckoClient
from data.fetcher import InputError
from utils.logging import get_logger

logger = get_logger(__name__)


def split_csv(value: str) -> list[str]:
    """Split a comma-separated option value, dropping blanks."""
    return [part.strip() for part in value.split(",") if part.strip()]


class SymbolResolver:
    """
    Resolves ticker symbols to coin IDs via the search endpoint.

    Usage:
        resolver = SymbolResolver(client)
        ids = resolver.resolve(["btc", "eth"])  # ["bitcoin", "ethereum"]
    """

    def __init__(self, client: CoinGeckoClient):
        self.client = client

    def resolve_one(self, symbol: str) -> str | None:
        """Return the coin ID for one symbol, or None if nothing matches."""
        wanted = symbol.strip().lower()
        results = self.client.search(wanted)

        for candidate in results.coins:
            if candidate.symbol.lower() == wanted:
                return candidate.id

        return None

    def resolve(self, symbols: list[str]) -> list[str]:
        """
        Resolve symbols in input order.

        Unmatched symbols are skipped with a warning and duplicates are
        resolved independently.

        Args:
            symbols: Ticker symbols, any case

        Returns:
            Coin IDs, one per matched symbol

        Raises:
            InputError: If none of the symbols resolved
        """
        symbols = [s.strip().lower() for s in symbols]
        logger.info("Resolving symbols: %s...", ", ".join(symbols))

        resolved: list[str] = []
        for symbol in symbols:
            coin_id = self.resolve_one(symbol)
            if coin_id is None:
                logger.warning('Symbol "%s" not found, skipping.', symbol)
                continue
            logger.debug("Resolved %s -> %s", symbol, coin_id)
            resolved.append(coin_id)

        if not resolved:
            raise InputError("No valid symbols resolved.")

        return resolved
