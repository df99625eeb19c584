"""
Typed views of CoinGecko response payloads.

One dataclass per endpoint shape. CoinGecko omits or nulls fields freely
(new listings without a rank, delisted coins without volume), so every field
other than the identifiers is optional and read with ``.get``.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# (timestamp in milliseconds, value)
SeriesPoint = tuple[int, float | None]


@dataclass
class SearchCoin:
    """One candidate coin from /search."""

    id: str
    symbol: str
    name: str
    market_cap_rank: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchCoin":
        return cls(
            id=data.get("id") or "",
            symbol=data.get("symbol") or "",
            name=data.get("name") or "",
            market_cap_rank=data.get("market_cap_rank"),
        )


@dataclass
class SearchResults:
    """Coin candidates returned by /search (exchanges and categories ignored)."""

    coins: list[SearchCoin] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchResults":
        # A candidate without an id cannot be resolved to anything
        coins = [c for c in data.get("coins") or [] if isinstance(c, dict) and c.get("id")]
        return cls(coins=[SearchCoin.from_dict(c) for c in coins])


@dataclass
class MarketEntry:
    """One coin's snapshot from /coins/markets."""

    id: str
    symbol: str
    name: str
    market_cap_rank: int | None = None
    current_price: float | None = None
    price_change_percentage_24h: float | None = None
    market_cap: float | None = None
    total_volume: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MarketEntry":
        return cls(
            id=data.get("id") or "",
            symbol=data.get("symbol") or "",
            name=data.get("name") or "",
            market_cap_rank=data.get("market_cap_rank"),
            current_price=data.get("current_price"),
            price_change_percentage_24h=data.get("price_change_percentage_24h"),
            market_cap=data.get("market_cap"),
            total_volume=data.get("total_volume"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for export."""
        return {
            "id": self.id,
            "symbol": self.symbol,
            "name": self.name,
            "market_cap_rank": self.market_cap_rank,
            "current_price": self.current_price,
            "price_change_percentage_24h": self.price_change_percentage_24h,
            "market_cap": self.market_cap,
            "total_volume": self.total_volume,
        }


def _parse_series(raw: list | None) -> list[SeriesPoint]:
    return [(int(point[0]), point[1]) for point in raw or [] if len(point) >= 2]


def format_timestamp_ms(timestamp_ms: int) -> str:
    """Render a millisecond timestamp as "YYYY-MM-DD HH:MM UTC"."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M") + " UTC"


@dataclass
class MarketChart:
    """
    Price, market cap and volume series from the market_chart endpoints.

    The three series are parallel: point ``i`` of each belongs to the same
    instant. They are aligned by position, never by timestamp.
    """

    prices: list[SeriesPoint] = field(default_factory=list)
    market_caps: list[SeriesPoint] = field(default_factory=list)
    total_volumes: list[SeriesPoint] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MarketChart":
        return cls(
            prices=_parse_series(data.get("prices")),
            market_caps=_parse_series(data.get("market_caps")),
            total_volumes=_parse_series(data.get("total_volumes")),
        )

    def extend(self, other: "MarketChart") -> None:
        """Append another chart's points after this chart's points."""
        self.prices.extend(other.prices)
        self.market_caps.extend(other.market_caps)
        self.total_volumes.extend(other.total_volumes)

    def is_empty(self) -> bool:
        return not self.prices

    def to_records(self) -> list[dict[str, Any]]:
        """
        Build one row per price point.

        Market cap and volume are taken at the same index; a shorter series
        yields None for the missing positions.
        """
        records = []
        for i, (timestamp_ms, price) in enumerate(self.prices):
            market_cap = self.market_caps[i][1] if i < len(self.market_caps) else None
            volume = self.total_volumes[i][1] if i < len(self.total_volumes) else None
            records.append(
                {
                    "datetime": format_timestamp_ms(timestamp_ms),
                    "price": price,
                    "market_cap": market_cap,
                    "total_volume": volume,
                }
            )
        return records


@dataclass
class CoinSnapshot:
    """A coin's market data on one day, from /coins/{id}/history."""

    id: str
    name: str
    date: str
    has_market_data: bool
    price: float | None = None
    market_cap: float | None = None
    total_volume: float | None = None

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        on_date: str,
        vs_currency: str,
    ) -> "CoinSnapshot":
        """
        Args:
            data: Raw /coins/{id}/history payload
            on_date: Requested date, YYYY-MM-DD
            vs_currency: Quote currency to pick out of market_data
        """
        market_data = data.get("market_data")
        currency = vs_currency.lower()

        def pick(key: str) -> float | None:
            if not market_data:
                return None
            return (market_data.get(key) or {}).get(currency)

        return cls(
            id=data.get("id") or "",
            name=data.get("name") or data.get("id") or "",
            date=on_date,
            has_market_data=bool(market_data),
            price=pick("current_price"),
            market_cap=pick("market_cap"),
            total_volume=pick("total_volume"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "price": self.price,
            "market_cap": self.market_cap,
            "total_volume": self.total_volume,
        }


@dataclass
class TrendingCoin:
    id: str
    name: str
    symbol: str
    market_cap_rank: int | None = None
    # The API sends price either as a number or a pre-formatted string
    price: float | str | None = None
    price_change_percentage_24h: float | None = None


@dataclass
class TrendingNft:
    id: str
    name: str
    symbol: str
    floor_price: float | str | None = None
    floor_price_change_percentage_24h: float | None = None


@dataclass
class TrendingCategory:
    id: int | str
    name: str
    coins_count: int | None = None
    market_cap: float | None = None
    market_cap_change_percentage_24h: float | None = None


@dataclass
class Trending:
    """Trending coins, NFTs and categories from /search/trending."""

    coins: list[TrendingCoin] = field(default_factory=list)
    nfts: list[TrendingNft] = field(default_factory=list)
    categories: list[TrendingCategory] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Trending":
        coins = []
        for entry in data.get("coins") or []:
            item = entry.get("item") or {}
            item_data = item.get("data") or {}
            coins.append(
                TrendingCoin(
                    id=item.get("id") or "",
                    name=item.get("name") or "",
                    symbol=item.get("symbol") or "",
                    market_cap_rank=item.get("market_cap_rank"),
                    price=item_data.get("price"),
                    price_change_percentage_24h=(
                        item_data.get("price_change_percentage_24h") or {}
                    ).get("usd"),
                )
            )

        nfts = []
        for nft in data.get("nfts") or []:
            nft_data = nft.get("data") or {}
            floor_price = nft_data.get("floor_price")
            if floor_price is None:
                floor_price = nft.get("floor_price_in_native_currency")
            nfts.append(
                TrendingNft(
                    id=nft.get("id") or "",
                    name=nft.get("name") or "",
                    symbol=nft.get("symbol") or "",
                    floor_price=floor_price,
                    floor_price_change_percentage_24h=(
                        nft_data.get("price_change_percentage_24h") or {}
                    ).get("usd"),
                )
            )

        categories = []
        for category in data.get("categories") or []:
            category_data = category.get("data") or {}
            categories.append(
                TrendingCategory(
                    id=category.get("id") or "",
                    name=category.get("name") or "",
                    coins_count=category.get("coins_count"),
                    market_cap=category_data.get("market_cap"),
                    market_cap_change_percentage_24h=(
                        category_data.get("market_cap_change_percentage_24h") or {}
                    ).get("usd"),
                )
            )

        return cls(coins=coins, nfts=nfts, categories=categories)
