"""
CoinGecko API client and response schemas.

Routing depends on the account tier:
- demo: public API host, x-cg-demo-api-key header
- pro: pro API host, x-cg-pro-api-key header
"""

from .coingecko import (
    APIError,
    AuthError,
    CoinGeckoClient,
    CoinGeckoError,
    Credentials,
    NetworkError,
    RateLimitError,
    Tier,
    resolve_endpoint,
)
from .models import (
    CoinSnapshot,
    MarketChart,
    MarketEntry,
    SearchCoin,
    SearchResults,
    Trending,
)

__all__ = [
    # Client and routing
    "CoinGeckoClient",
    "Credentials",
    "Tier",
    "resolve_endpoint",
    # Errors
    "CoinGeckoError",
    "AuthError",
    "RateLimitError",
    "APIError",
    "NetworkError",
    # Schemas
    "CoinSnapshot",
    "MarketChart",
    "MarketEntry",
    "SearchCoin",
    "SearchResults",
    "Trending",
]
