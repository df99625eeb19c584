"""
Tests for CoinGecko API client.

Tests cover:
- Tier routing and credentials
- Client initialization and auth headers
- Rate limiting behavior
- Failure classification
- Endpoint wrappers
"""

import time
from unittest.mock import patch

import pytest
import requests

from api.coingecko import (
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
from api.models import MarketChart, MarketEntry


class TestResolveEndpoint:
    """Tests for tier-based routing."""

    def test_demo_tier(self):
        base_url, header = resolve_endpoint(Tier.DEMO)

        assert base_url == "https://api.coingecko.com/api/v3"
        assert header == "x-cg-demo-api-key"

    def test_pro_tier(self):
        base_url, header = resolve_endpoint(Tier.PRO)

        assert base_url == "https://pro-api.coingecko.com/api/v3"
        assert header == "x-cg-pro-api-key"

    def test_missing_tier_defaults_to_demo(self):
        assert resolve_endpoint(None) == resolve_endpoint(Tier.DEMO)

    def test_unknown_tier_defaults_to_demo(self):
        assert resolve_endpoint("enterprise") == resolve_endpoint(Tier.DEMO)

    def test_tier_string_is_case_insensitive(self):
        assert resolve_endpoint("PRO") == resolve_endpoint(Tier.PRO)

    @pytest.mark.parametrize("value", [1, True, 2.5, ["pro"], {"tier": "pro"}, ""])
    def test_non_string_or_blank_tier_defaults_to_demo(self, value):
        assert Tier.parse(value) is Tier.DEMO
        assert resolve_endpoint(value) == resolve_endpoint(Tier.DEMO)


class TestCoinGeckoClientInit:
    """Tests for client initialization."""

    def test_default_initialization(self):
        """Test client initializes as unauthenticated demo."""
        client = CoinGeckoClient()

        assert client.base_url == "https://api.coingecko.com/api/v3"
        assert client.calls_per_minute == 0
        assert client._last_request_time is None
        assert "x-cg-demo-api-key" not in client.session.headers

    def test_demo_key_in_headers(self):
        """Test that a demo key uses the demo header."""
        client = CoinGeckoClient(Credentials(api_key="CG-demo", tier=Tier.DEMO))

        assert client.session.headers["x-cg-demo-api-key"] == "CG-demo"
        assert "x-cg-pro-api-key" not in client.session.headers

    def test_pro_key_in_headers(self):
        """Test that a pro key routes to the pro host and header."""
        client = CoinGeckoClient(Credentials(api_key="CG-pro", tier=Tier.PRO))

        assert client.base_url == "https://pro-api.coingecko.com/api/v3"
        assert client.session.headers["x-cg-pro-api-key"] == "CG-pro"

    def test_empty_key_sends_no_header(self):
        client = CoinGeckoClient(Credentials(api_key="", tier=Tier.PRO))

        assert "x-cg-pro-api-key" not in client.session.headers


class TestCoinGeckoClientRateLimiting:
    """Tests for rate limiting behavior."""

    def test_rate_limit_interval_calculation(self):
        """Test that min_interval is calculated correctly."""
        client = CoinGeckoClient(calls_per_minute=10)
        assert client.min_interval == 6.0  # 60/10 = 6 seconds

        client = CoinGeckoClient(calls_per_minute=30)
        assert client.min_interval == 2.0

    def test_zero_disables_pacing(self):
        client = CoinGeckoClient(calls_per_minute=0)
        assert client.min_interval == 0.0

    def test_wait_for_rate_limit_first_call(self):
        """Test that first call doesn't wait."""
        client = CoinGeckoClient()

        start = time.time()
        client._wait_for_rate_limit()
        elapsed = time.time() - start

        assert elapsed < 0.1

    def test_wait_for_rate_limit_respects_interval(self):
        """Test that subsequent calls respect the rate limit."""
        client = CoinGeckoClient(calls_per_minute=60)  # 1 second interval

        # Simulate a previous request
        client._last_request_time = time.time()

        with patch("api.coingecko.time.sleep") as mock_sleep:
            client._wait_for_rate_limit()

        mock_sleep.assert_called_once()
        assert 0.9 <= mock_sleep.call_args[0][0] <= 1.0

    def test_default_client_never_sleeps(self, mock_response):
        """Consecutive requests go out back to back unless pacing is requested."""
        client = CoinGeckoClient(Credentials(api_key="CG-demo", tier=Tier.DEMO))

        with patch.object(client.session, "get") as mock_get, patch(
            "api.coingecko.time.sleep"
        ) as mock_sleep:
            mock_get.return_value = mock_response(200, [])
            for page in range(1, 4):
                client._request("/coins/markets", params={"page": page})

        assert mock_get.call_count == 3
        mock_sleep.assert_not_called()
        assert client._last_request_time is None


class TestCoinGeckoClientRequests:
    """Tests for request execution and failure classification."""

    @pytest.fixture
    def client(self):
        """Create a client without pacing."""
        return CoinGeckoClient(
            Credentials(api_key="CG-test", tier=Tier.DEMO),
            calls_per_minute=0,
        )

    def test_successful_request(self, client, mock_response):
        """Test a successful API request."""
        with patch.object(client.session, "get") as mock_get:
            mock_get.return_value = mock_response(200, {"gecko_says": "(V3) To the Moon!"})

            result = client._request("/ping")

            assert result == {"gecko_says": "(V3) To the Moon!"}
            mock_get.assert_called_once()
            assert mock_get.call_args[0][0] == "https://api.coingecko.com/api/v3/ping"

    def test_query_params_passed_through(self, client, mock_response):
        with patch.object(client.session, "get") as mock_get:
            mock_get.return_value = mock_response(200, [])

            client._request("/coins/markets", params={"page": 2})

            assert mock_get.call_args[1]["params"] == {"page": 2}

    def test_any_2xx_is_success(self, client, mock_response):
        with patch.object(client.session, "get") as mock_get:
            mock_get.return_value = mock_response(203, {"ok": True})

            assert client._request("/test") == {"ok": True}

    def test_401_raises_auth_error(self, client, mock_response):
        with patch.object(client.session, "get") as mock_get:
            mock_get.return_value = mock_response(401, {"error": "invalid key"}, "Unauthorized")

            with pytest.raises(AuthError) as exc_info:
                client._request("/test")

            assert "401" in str(exc_info.value)
            assert "geckocli auth" in str(exc_info.value)

    def test_429_raises_rate_limit_error(self, client, mock_response):
        """Test that 429 response raises RateLimitError without retrying."""
        with patch.object(client.session, "get") as mock_get:
            mock_get.return_value = mock_response(429)

            with pytest.raises(RateLimitError):
                client._request("/test")

            mock_get.assert_called_once()

    def test_api_error_carries_status_and_message(self, client, mock_response):
        """Test that other statuses raise APIError with the API's message."""
        with patch.object(client.session, "get") as mock_get:
            mock_get.return_value = mock_response(404, {"error": "coin not found"}, "Not Found")

            with pytest.raises(APIError) as exc_info:
                client._request("/coins/nope/history")

            assert exc_info.value.status_code == 404
            assert exc_info.value.message == "coin not found"
            assert "404" in str(exc_info.value)

    def test_api_error_reads_status_error_message(self, client, mock_response):
        payload = {"status": {"error_code": 10010, "error_message": "plan limit"}}
        with patch.object(client.session, "get") as mock_get:
            mock_get.return_value = mock_response(400, payload, "Bad Request")

            with pytest.raises(APIError) as exc_info:
                client._request("/test")

            assert exc_info.value.message == "plan limit"

    def test_api_error_falls_back_to_reason(self, client, mock_response):
        with patch.object(client.session, "get") as mock_get:
            mock_get.return_value = mock_response(
                500, ValueError("not json"), "Internal Server Error"
            )

            with pytest.raises(APIError) as exc_info:
                client._request("/test")

            assert exc_info.value.status_code == 500
            assert exc_info.value.message == "Internal Server Error"

    def test_connection_failure_raises_network_error(self, client):
        with patch.object(client.session, "get") as mock_get:
            mock_get.side_effect = requests.ConnectionError("Name or service not known")

            with pytest.raises(NetworkError) as exc_info:
                client._request("/test")

            assert "Name or service not known" in str(exc_info.value)

    def test_timeout_raises_network_error(self, client):
        with patch.object(client.session, "get") as mock_get:
            mock_get.side_effect = requests.Timeout("read timed out")

            with pytest.raises(NetworkError):
                client._request("/test")

    def test_error_classes_share_base(self):
        for error in (AuthError(), RateLimitError(), APIError(500, "x"), NetworkError("x")):
            assert isinstance(error, CoinGeckoError)

    def test_error_messages_are_distinct(self):
        messages = {
            str(AuthError()),
            str(RateLimitError()),
            str(APIError(500, "x")),
            str(NetworkError("x")),
        }
        assert len(messages) == 4


class TestCoinGeckoClientEndpoints:
    """Tests for endpoint wrappers."""

    @pytest.fixture
    def client(self):
        return CoinGeckoClient(calls_per_minute=0)

    def test_get_coins_markets_parses_entries(self, client):
        with patch.object(client, "_request") as mock_request:
            mock_request.return_value = [
                {
                    "id": "bitcoin",
                    "symbol": "btc",
                    "name": "Bitcoin",
                    "market_cap_rank": 1,
                    "current_price": 65000.0,
                    "price_change_percentage_24h": -1.5,
                    "market_cap": 1.2e12,
                    "total_volume": 3.0e10,
                }
            ]

            entries = client.get_coins_markets(vs_currency="usd", per_page=1, page=3)

            assert entries == [
                MarketEntry(
                    id="bitcoin",
                    symbol="btc",
                    name="Bitcoin",
                    market_cap_rank=1,
                    current_price=65000.0,
                    price_change_percentage_24h=-1.5,
                    market_cap=1.2e12,
                    total_volume=3.0e10,
                )
            ]
            endpoint = mock_request.call_args[0][0]
            params = mock_request.call_args[1]["params"]
            assert endpoint == "/coins/markets"
            assert params["per_page"] == 1
            assert params["page"] == 3
            assert params["sparkline"] == "false"
            assert params["price_change_percentage"] == "24h"

    def test_get_coin_market_chart_range_params(self, client, chart_payload):
        with patch.object(client, "_request") as mock_request:
            mock_request.return_value = chart_payload(1_700_000_000_000, 3)

            chart = client.get_coin_market_chart_range("bitcoin", "usd", 100, 200)

            assert isinstance(chart, MarketChart)
            assert len(chart.prices) == 3
            assert mock_request.call_args[0][0] == "/coins/bitcoin/market_chart/range"
            assert mock_request.call_args[1]["params"] == {
                "vs_currency": "usd",
                "from": 100,
                "to": 200,
            }

    def test_get_coin_market_chart_sends_days(self, client, chart_payload):
        with patch.object(client, "_request") as mock_request:
            mock_request.return_value = chart_payload(1_700_000_000_000, 2)

            client.get_coin_market_chart("ethereum", vs_currency="eur", days=30)

            assert mock_request.call_args[0][0] == "/coins/ethereum/market_chart"
            assert mock_request.call_args[1]["params"] == {"vs_currency": "eur", "days": "30"}

    def test_get_coin_snapshot(self, client):
        with patch.object(client, "_request") as mock_request:
            mock_request.return_value = {
                "id": "bitcoin",
                "name": "Bitcoin",
                "market_data": {
                    "current_price": {"usd": 42000.0},
                    "market_cap": {"usd": 8.2e11},
                    "total_volume": {"usd": 1.9e10},
                },
            }

            snapshot = client.get_coin_snapshot("bitcoin", "2024-01-15", "15-01-2024", "usd")

            assert snapshot.price == 42000.0
            assert snapshot.has_market_data is True
            assert mock_request.call_args[1]["params"] == {
                "date": "15-01-2024",
                "localization": "false",
            }

    def test_search(self, client):
        with patch.object(client, "_request") as mock_request:
            mock_request.return_value = {
                "coins": [{"id": "bitcoin", "symbol": "BTC", "name": "Bitcoin"}],
                "exchanges": [],
            }

            results = client.search("btc")

            assert results.coins[0].id == "bitcoin"
            assert mock_request.call_args[1]["params"] == {"query": "btc"}

    def test_get_simple_price_joins_lists(self, client):
        with patch.object(client, "_request") as mock_request:
            mock_request.return_value = {"bitcoin": {"usd": 1.0}}

            client.get_simple_price(["bitcoin", "ethereum"], ["usd", "eur"])

            params = mock_request.call_args[1]["params"]
            assert params["ids"] == "bitcoin,ethereum"
            assert params["vs_currencies"] == "usd,eur"
            assert params["include_24hr_change"] == "true"
            assert params["include_market_cap"] == "true"


class TestCoinGeckoClientPing:
    """Tests for ping method."""

    def test_ping_success(self):
        """Test that ping returns True on success."""
        client = CoinGeckoClient()

        with patch.object(client, "_request") as mock_request:
            mock_request.return_value = {"gecko_says": "hello"}

            assert client.ping() is True

    def test_ping_failure(self):
        """Test that ping returns False on error."""
        client = CoinGeckoClient()

        with patch.object(client, "_request") as mock_request:
            mock_request.side_effect = NetworkError("Connection failed")

            assert client.ping() is False
