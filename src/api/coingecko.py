"""
CoinGecko API client for geckocli.

Provides:
- Tier-based routing (demo/pro base URL and auth header)
- A single request executor that classifies every failure
- Thin wrappers for the endpoints the commands use

The client never retries: a failed request raises one of the
CoinGeckoError subclasses and the caller decides what to do.
"""

import time
from dataclasses import dataclass
from enum import Enum
from importlib.metadata import PackageNotFoundError, version
from typing import Any

import requests

from api.models import CoinSnapshot, MarketChart, MarketEntry, SearchResults, Trending
from config import (
    COINGECKO_AUTH_HEADERS,
    COINGECKO_BASE_URLS,
    DEFAULT_MARKETS_ORDER,
    DEFAULT_TIER,
    DEFAULT_VS_CURRENCY,
    MARKETS_PAGE_SIZE,
    REQUEST_TIMEOUT,
)
from utils.logging import get_logger

logger = get_logger(__name__)


def get_version() -> str:
    """Get package version for User-Agent."""
    try:
        return version("geckocli")
    except PackageNotFoundError:
        return "dev"


class CoinGeckoError(Exception):
    """Base exception for CoinGecko API errors."""

    pass


class AuthError(CoinGeckoError):
    """Raised on HTTP 401: the API key is invalid or missing."""

    def __init__(self) -> None:
        super().__init__(
            "Authentication failed (401): your API key is invalid or missing. "
            "Run: geckocli auth"
        )


class RateLimitError(CoinGeckoError):
    """Raised on HTTP 429: the plan's rate limit is exhausted."""

    def __init__(self) -> None:
        super().__init__(
            "Rate limit exceeded (429): wait a moment and try again, "
            "or upgrade your CoinGecko plan"
        )


class APIError(CoinGeckoError):
    """Raised for any other HTTP error status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"API error {status_code}: {message}")


class NetworkError(CoinGeckoError):
    """Raised when no HTTP response was obtained (DNS, timeout, reset)."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Network error: {reason}")


class Tier(str, Enum):
    """CoinGecko account tier."""

    DEMO = "demo"
    PRO = "pro"

    @classmethod
    def parse(cls, value: "str | Tier | None") -> "Tier":
        """Map a stored tier value to a Tier, defaulting to demo."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls(DEFAULT_TIER)
        try:
            return cls(value.strip().lower() or DEFAULT_TIER)
        except ValueError:
            return cls(DEFAULT_TIER)


@dataclass(frozen=True)
class Credentials:
    """API key and tier, borrowed per request and never modified."""

    api_key: str | None = None
    tier: Tier = Tier.DEMO


def resolve_endpoint(tier: "Tier | str | None") -> tuple[str, str]:
    """
    Resolve the base URL and auth header name for a tier.

    Args:
        tier: Account tier; None or unknown values fall back to demo

    Returns:
        Tuple of (base_url, auth_header_name)
    """
    tier = Tier.parse(tier)
    return COINGECKO_BASE_URLS[tier.value], COINGECKO_AUTH_HEADERS[tier.value]


def _error_message(response: requests.Response) -> str:
    """Pull the API's own error text out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        if body.get("error"):
            return str(body["error"])
        status = body.get("status")
        if isinstance(status, dict) and status.get("error_message"):
            return str(status["error_message"])

    return response.reason or response.text or "Unknown error"


class CoinGeckoClient:
    """
    CoinGecko API client with tier routing and optional client-side pacing.

    Usage:
        client = CoinGeckoClient(Credentials(api_key="CG-...", tier=Tier.DEMO))
        page = client.get_coins_markets(per_page=250, page=1)
        chart = client.get_coin_market_chart_range("bitcoin", "usd", from_ts, to_ts)
    """

    def __init__(
        self,
        credentials: Credentials | None = None,
        calls_per_minute: int = 0,
        timeout: float = REQUEST_TIMEOUT,
    ):
        """
        Initialize the CoinGecko client.

        Args:
            credentials: API key and tier (default: unauthenticated demo)
            calls_per_minute: Opt-in pacing limit (default 0: requests go out
                back to back)
            timeout: Seconds to wait for a response
        """
        self.credentials = credentials or Credentials()
        self.base_url, self.auth_header = resolve_endpoint(self.credentials.tier)

        self.calls_per_minute = calls_per_minute
        self.min_interval = 60.0 / calls_per_minute if calls_per_minute > 0 else 0.0
        self.timeout = timeout
        self._last_request_time: float | None = None

        self.session = requests.Session()
        headers = {
            "Accept": "application/json",
            "User-Agent": f"geckocli/{get_version()}",
        }
        if self.credentials.api_key:
            headers[self.auth_header] = self.credentials.api_key
        self.session.headers.update(headers)

    def _wait_for_rate_limit(self) -> None:
        """Wait if necessary to respect rate limits."""
        if self._last_request_time is not None:
            elapsed = time.time() - self._last_request_time
            if elapsed < self.min_interval:
                sleep_time = self.min_interval - elapsed
                logger.debug("Pacing requests: sleeping %.2fs", sleep_time)
                time.sleep(sleep_time)

    def _request(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> dict | list:
        """
        Make one GET request to the CoinGecko API.

        Args:
            endpoint: API endpoint (e.g., "/coins/markets")
            params: Query parameters

        Returns:
            Parsed JSON response

        Raises:
            AuthError: HTTP 401
            RateLimitError: HTTP 429
            APIError: Any other non-2xx status
            NetworkError: No response (DNS failure, timeout, connection reset)
        """
        self._wait_for_rate_limit()

        url = f"{self.base_url}{endpoint}"
        logger.debug("GET %s params=%s", url, params)

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(str(e)) from e
        finally:
            if self.min_interval:
                self._last_request_time = time.time()

        if response.status_code == 401:
            raise AuthError()

        if response.status_code == 429:
            raise RateLimitError()

        if not 200 <= response.status_code < 300:
            raise APIError(response.status_code, _error_message(response))

        try:
            return response.json()
        except ValueError as e:
            raise APIError(response.status_code, f"Invalid JSON in response: {e}") from e

    def ping(self) -> bool:
        """
        Check if the API is reachable.

        Returns:
            True if API responds successfully
        """
        try:
            self._request("/ping")
            return True
        except CoinGeckoError:
            return False

    def search(self, query: str) -> SearchResults:
        """Search coins by free-text query (one term per request)."""
        data = self._request("/search", params={"query": query})
        return SearchResults.from_dict(data)

    def get_trending(self) -> Trending:
        """Fetch trending coins, NFTs and categories of the last 24h."""
        return Trending.from_dict(self._request("/search/trending"))

    def get_simple_price(
        self,
        ids: list[str],
        vs_currencies: list[str],
    ) -> dict[str, dict[str, float]]:
        """
        Fetch current prices, 24h change and market cap.

        Returns:
            Mapping coin_id -> {"usd": ..., "usd_24h_change": ..., "usd_market_cap": ...}
        """
        data = self._request(
            "/simple/price",
            params={
                "ids": ",".join(ids),
                "vs_currencies": ",".join(vs_currencies),
                "include_24hr_change": "true",
                "include_market_cap": "true",
            },
        )
        return data or {}

    def get_coins_markets(
        self,
        vs_currency: str = DEFAULT_VS_CURRENCY,
        order: str = DEFAULT_MARKETS_ORDER,
        per_page: int = MARKETS_PAGE_SIZE,
        page: int = 1,
    ) -> list[MarketEntry]:
        """
        Fetch one page of the market listing.

        Args:
            vs_currency: Quote currency for prices
            order: Sort order (e.g., "market_cap_desc", "volume_desc")
            per_page: Entries per page (API max 250)
            page: 1-based page number

        Returns:
            MarketEntry list in API order
        """
        data = self._request(
            "/coins/markets",
            params={
                "vs_currency": vs_currency,
                "order": order,
                "per_page": per_page,
                "page": page,
                "sparkline": "false",
                "price_change_percentage": "24h",
            },
        )
        return [MarketEntry.from_dict(entry) for entry in data or []]

    def get_coin_market_chart(
        self,
        coin_id: str,
        vs_currency: str = DEFAULT_VS_CURRENCY,
        days: int | str = 1,
    ) -> MarketChart:
        """
        Fetch market data for the last N days.

        Granularity is chosen by the API: 5-minutely for 1 day,
        hourly up to 90 days, daily beyond.
        """
        data = self._request(
            f"/coins/{coin_id}/market_chart",
            params={
                "vs_currency": vs_currency,
                "days": str(days),
            },
        )
        return MarketChart.from_dict(data)

    def get_coin_market_chart_range(
        self,
        coin_id: str,
        vs_currency: str,
        from_ts: int,
        to_ts: int,
    ) -> MarketChart:
        """
        Fetch market data between two UNIX timestamps (seconds, inclusive).
        """
        data = self._request(
            f"/coins/{coin_id}/market_chart/range",
            params={
                "vs_currency": vs_currency,
                "from": from_ts,
                "to": to_ts,
            },
        )
        return MarketChart.from_dict(data)

    def get_coin_history(self, coin_id: str, api_date: str) -> dict[str, Any]:
        """
        Fetch the raw snapshot payload of a coin on one day.

        Args:
            coin_id: CoinGecko coin ID
            api_date: Date in the API's DD-MM-YYYY format
        """
        return self._request(
            f"/coins/{coin_id}/history",
            params={
                "date": api_date,
                "localization": "false",
            },
        )

    def get_coin_snapshot(
        self,
        coin_id: str,
        on_date: str,
        api_date: str,
        vs_currency: str = DEFAULT_VS_CURRENCY,
    ) -> CoinSnapshot:
        """Fetch a coin's snapshot and pick out one quote currency."""
        data = self.get_coin_history(coin_id, api_date)
        return CoinSnapshot.from_dict(data or {}, on_date=on_date, vs_currency=vs_currency)
