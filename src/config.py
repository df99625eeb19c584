"""
Configuration constants for geckocli.

geckocli - CoinGecko market data from the terminal.
"""

from pathlib import Path

# =============================================================================
# Project Paths
# =============================================================================

# Credentials live outside the project so they survive reinstalls
CONFIG_DIR = Path.home() / ".config" / "geckocli"
CREDENTIALS_FILE = CONFIG_DIR / "config.json"

# =============================================================================
# CoinGecko API Configuration
# =============================================================================

# Base URL and authentication header per account tier
COINGECKO_BASE_URLS = {
    "demo": "https://api.coingecko.com/api/v3",
    "pro": "https://pro-api.coingecko.com/api/v3",
}

COINGECKO_AUTH_HEADERS = {
    "demo": "x-cg-demo-api-key",
    "pro": "x-cg-pro-api-key",
}

DEFAULT_TIER = "demo"

# Seconds before an unanswered request counts as a network failure
REQUEST_TIMEOUT = 30

# =============================================================================
# Pagination and Chunking
# =============================================================================

# /coins/markets returns at most 250 entries per page
MARKETS_PAGE_SIZE = 250

# /coins/{id}/market_chart/range keeps daily granularity up to 90 days
MAX_RANGE_DAYS = 90

SECONDS_PER_DAY = 86400

# =============================================================================
# Command Defaults
# =============================================================================

DEFAULT_VS_CURRENCY = "usd"
DEFAULT_COIN_IDS = "bitcoin"
DEFAULT_MARKETS_TOTAL = 100
DEFAULT_MARKETS_ORDER = "market_cap_desc"
DEFAULT_SEARCH_LIMIT = 10

# =============================================================================
# Display Limits
# =============================================================================

CHART_DISPLAY_LIMIT = 50
TRENDING_COINS_LIMIT = 15
TRENDING_NFTS_LIMIT = 7
TRENDING_CATEGORIES_LIMIT = 6

# Number of leading API key characters shown by `status` and `auth`
API_KEY_VISIBLE_CHARS = 6
