"""
Number formatting helpers for terminal tables.
"""

from config import API_KEY_VISIBLE_CHARS

NOT_AVAILABLE = "N/A"


def format_usd(value: float | None) -> str:
    """Format a price with 2 to 8 decimals, e.g. 0.00001234 -> "$0.00001234"."""
    if value is None:
        return NOT_AVAILABLE

    text = f"{abs(value):,.8f}".rstrip("0")
    whole, _, decimals = text.partition(".")
    decimals = decimals.ljust(2, "0")
    sign = "-" if value < 0 else ""
    return f"{sign}${whole}.{decimals}"


def format_large_usd(value: float | None) -> str:
    """Abbreviate market caps and volumes: $1.23T, $4.56B, $7.89M."""
    if value is None:
        return NOT_AVAILABLE
    if value >= 1e12:
        return f"${value / 1e12:.2f}T"
    if value >= 1e9:
        return f"${value / 1e9:.2f}B"
    if value >= 1e6:
        return f"${value / 1e6:.2f}M"
    return format_usd(value)


def format_change(value: float | None) -> str:
    """Format a percentage change with a direction marker."""
    if value is None:
        return NOT_AVAILABLE
    marker = "▲" if value >= 0 else "▼"
    return f"{marker} {value:.2f}%"


def mask_api_key(api_key: str) -> str:
    """Show the first few characters of a key and star out the rest."""
    visible = api_key[:API_KEY_VISIBLE_CHARS]
    return visible + "*" * max(0, len(api_key) - API_KEY_VISIBLE_CHARS)
