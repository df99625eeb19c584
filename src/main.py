"""
geckocli - CoinGecko market data from the terminal

Command-line entry point.

Usage:
    python -m main [command] [options]

Commands:
    auth        Save your CoinGecko API key and tier (demo/pro)
    status      Show current auth configuration
    price       Current price of one or more coins
    markets     Top coins by market cap (paginated past 250)
    search      Search coins by name or symbol
    trending    Trending coins, NFTs and categories (24h)
    history     Historical data: single date, last N days, or a date range

Examples:
    # Store a demo key
    python -m main auth --key CG-xxxx --tier demo

    # Verify the stored key reaches the API
    python -m main status --check

    # Prices by symbol
    python -m main price --symbols btc,eth --vs usd,eur

    # Top 700 coins exported to CSV
    python -m main markets --total 700 --export markets.csv

    # Two years of daily data, fetched in 90-day chunks
    python -m main history bitcoin --from 2022-01-01 --to 2024-01-01
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

import pandas as pd

from api.coingecko import CoinGeckoClient, CoinGeckoError, Tier
from api.models import MarketChart
from config import (
    CHART_DISPLAY_LIMIT,
    DEFAULT_COIN_IDS,
    DEFAULT_MARKETS_ORDER,
    DEFAULT_MARKETS_TOTAL,
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_VS_CURRENCY,
    TRENDING_CATEGORIES_LIMIT,
    TRENDING_COINS_LIMIT,
    TRENDING_NFTS_LIMIT,
)
from data.credentials import CredentialStore
from data.export import (
    SNAPSHOT_EXPORT_COLUMNS,
    chart_to_frame,
    export_csv,
    market_entries_to_frame,
    records_to_frame,
)
from data.fetcher import DataFetcher, FetcherError, InputError
from data.symbols import SymbolResolver, split_csv
from utils.formatting import format_change, format_large_usd, format_usd, mask_api_key
from utils.logging import get_logger, setup_logging

# Module logger
logger = get_logger(__name__)

TIER_CHOICES = [
    (Tier.DEMO, "demo  - Free tier (public API)"),
    (Tier.PRO, "pro   - Paid tier (pro API)"),
]


# =============================================================================
# Helpers
# =============================================================================


def _make_client(store: CredentialStore | None = None) -> CoinGeckoClient:
    """Build an API client from the stored credentials."""
    store = store or CredentialStore()
    return CoinGeckoClient(credentials=store.load())


def _log_table(rows: list[list], headers: list[str]) -> None:
    """Log rows as a plain-text table."""
    table = pd.DataFrame(rows, columns=headers)
    for line in table.to_string(index=False).splitlines():
        logger.info("  %s", line)


def _footer(text: str) -> None:
    logger.info("  %s  •  %s", text, datetime.now().strftime("%H:%M:%S"))


def _prompt(question: str) -> str:
    return input(question).strip()


def _prompt_tier() -> Tier | None:
    """Ask for a tier by number; None on an invalid choice."""
    logger.info("Select your API tier:")
    for i, (_, label) in enumerate(TIER_CHOICES, start=1):
        logger.info("  %d. %s", i, label)

    raw = _prompt(f"Enter number [1-{len(TIER_CHOICES)}]: ")
    try:
        index = int(raw) - 1
    except ValueError:
        return None
    if not 0 <= index < len(TIER_CHOICES):
        return None
    return TIER_CHOICES[index][0]


def _show_chart(chart: MarketChart, coin_id: str, currency: str, export: Path | None) -> None:
    """Log the tail of a market chart and optionally export all of it."""
    if chart.is_empty():
        raise InputError("No price data returned.")

    records = chart.to_records()
    shown = records[-CHART_DISPLAY_LIMIT:]

    if len(records) > CHART_DISPLAY_LIMIT:
        logger.info(
            "  Showing last %d of %d data points. Use --export for the full dataset.",
            CHART_DISPLAY_LIMIT,
            len(records),
        )

    _log_table(
        [
            [
                r["datetime"],
                format_usd(r["price"]),
                format_large_usd(r["market_cap"]),
                format_large_usd(r["total_volume"]),
            ]
            for r in shown
        ],
        ["Date / Time (UTC)", f"Price ({currency.upper()})", "Market Cap", "24h Volume"],
    )
    _footer(f"{len(records)} data points  •  {coin_id} vs {currency.upper()}")

    if export:
        path = export_csv(chart_to_frame(chart), export)
        logger.info("Data exported to %s", path)


# =============================================================================
# Commands
# =============================================================================


def cmd_auth(args: argparse.Namespace) -> int:
    """Save API key and tier, or remove them with --clear."""
    if args.clear:
        if CredentialStore().clear():
            logger.info("Stored credentials removed")
        else:
            logger.info("No stored credentials to remove")
        return 0

    if args.tier:
        tier_value = args.tier.strip().lower()
        if tier_value not in {t.value for t in Tier}:
            logger.error('Tier must be "demo" or "pro"')
            return 1
        tier = Tier(tier_value)
    else:
        tier = _prompt_tier()
        if tier is None:
            logger.error("Invalid selection")
            return 1

    api_key = args.key
    if not api_key:
        logger.info("Get your free key at: https://www.coingecko.com/en/api")
        api_key = _prompt("Enter your API key: ")

    if not api_key:
        logger.error("API key cannot be empty")
        return 1

    store = CredentialStore()
    path = store.save(api_key, tier)

    logger.info("Credentials saved to %s", path)
    logger.info("  Tier  %s", tier.value)
    logger.info("  Key   %s", mask_api_key(api_key))
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show current auth configuration."""
    credentials = CredentialStore().load()

    if not credentials.api_key:
        logger.warning("No credentials configured.")
        logger.info("  Run: geckocli auth")
        return 0

    logger.info("Credentials configured")
    logger.info("  Tier  %s", credentials.tier.value)
    logger.info("  Key   %s", mask_api_key(credentials.api_key))

    if args.check:
        logger.info("Checking CoinGecko API connectivity...")
        if not _make_client().ping():
            logger.error("Could not reach the CoinGecko API")
            return 1
        logger.info("API is reachable")
    return 0


def cmd_price(args: argparse.Namespace) -> int:
    """Current prices for coin IDs or resolved symbols."""
    client = _make_client()

    if args.symbols:
        coin_ids = SymbolResolver(client).resolve(split_csv(args.symbols))
    else:
        coin_ids = split_csv(args.ids)

    currencies = split_csv(args.vs)

    logger.info("Fetching prices for: %s", ",".join(coin_ids))
    data = client.get_simple_price(coin_ids, currencies)

    if not data:
        raise InputError("No data returned. Check your coin IDs.")

    rows = []
    for coin_id, values in data.items():
        rows.append(
            [coin_id]
            + [format_usd(values.get(c)) for c in currencies]
            + [format_change(values.get(f"{c}_24h_change")) for c in currencies]
        )

    _log_table(
        rows,
        ["Coin"]
        + [f"{c.upper()} Price" for c in currencies]
        + [f"24h Change ({c.upper()})" for c in currencies],
    )
    _footer("Data from CoinGecko")
    return 0


def cmd_markets(args: argparse.Namespace) -> int:
    """Top coins by market cap."""
    fetcher = DataFetcher(client=_make_client())
    currency = args.vs

    entries = fetcher.fetch_markets(
        total=args.total,
        vs_currency=currency,
        order=args.order,
        show_progress=not args.quiet,
    )

    logger.info("Loaded %d coins", len(entries))

    _log_table(
        [
            [
                entry.market_cap_rank if entry.market_cap_rank is not None else "-",
                entry.name,
                entry.symbol.upper(),
                format_usd(entry.current_price),
                format_change(entry.price_change_percentage_24h),
                format_large_usd(entry.market_cap),
                format_large_usd(entry.total_volume),
            ]
            for entry in entries
        ],
        ["#", "Coin", "Symbol", f"Price ({currency.upper()})", "24h Change", "Market Cap", "24h Volume"],
    )
    _footer(f"{len(entries)} coins  •  vs {currency.upper()}")

    if args.export:
        path = export_csv(market_entries_to_frame(entries), args.export)
        logger.info("Data exported to %s", path)

    return 0


def cmd_search(args: argparse.Namespace) -> int:
    """Search coins."""
    limit = max(1, args.limit)
    logger.info('Searching for "%s"...', args.query)

    results = _make_client().search(args.query)
    coins = results.coins[:limit]

    if not coins:
        logger.info('No results found for "%s".', args.query)
        return 0

    _log_table(
        [
            [
                i,
                coin.name,
                coin.symbol.upper(),
                coin.id,
                f"#{coin.market_cap_rank}" if coin.market_cap_rank else "-",
            ]
            for i, coin in enumerate(coins, start=1)
        ],
        ["#", "Name", "Symbol", "Coin ID", "Market Cap Rank"],
    )
    logger.info('%d result(s) for "%s"', len(coins), args.query)
    return 0


def cmd_trending(args: argparse.Namespace) -> int:
    """Trending coins, NFTs and categories."""
    logger.info("Fetching trending data...")
    trending = _make_client().get_trending()

    coins = trending.coins[:TRENDING_COINS_LIMIT]
    if coins:
        logger.info("Top %d Trending Coins", TRENDING_COINS_LIMIT)
        _log_table(
            [
                [
                    i,
                    coin.name,
                    coin.symbol.upper() or "-",
                    f"#{coin.market_cap_rank}" if coin.market_cap_rank else "-",
                    format_usd(coin.price) if isinstance(coin.price, (int, float)) else (coin.price or "N/A"),
                    format_change(coin.price_change_percentage_24h),
                ]
                for i, coin in enumerate(coins, start=1)
            ],
            ["#", "Coin", "Symbol", "Rank", "Price (USD)", "24h Change"],
        )

    nfts = trending.nfts[:TRENDING_NFTS_LIMIT]
    if nfts:
        logger.info("Top %d Trending NFTs", TRENDING_NFTS_LIMIT)
        _log_table(
            [
                [
                    i,
                    nft.name,
                    nft.symbol.upper() or "-",
                    str(nft.floor_price) if nft.floor_price is not None else "N/A",
                    format_change(nft.floor_price_change_percentage_24h),
                ]
                for i, nft in enumerate(nfts, start=1)
            ],
            ["#", "NFT Collection", "Symbol", "Floor Price", "24h Change"],
        )

    categories = trending.categories[:TRENDING_CATEGORIES_LIMIT]
    if categories:
        logger.info("Top %d Trending Categories", TRENDING_CATEGORIES_LIMIT)
        _log_table(
            [
                [
                    i,
                    category.name,
                    category.coins_count if category.coins_count is not None else "-",
                    format_large_usd(category.market_cap),
                    format_change(category.market_cap_change_percentage_24h),
                ]
                for i, category in enumerate(categories, start=1)
            ],
            ["#", "Category", "Coins", "Market Cap", "24h Change"],
        )

    _footer("Trending data from CoinGecko")
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    """Historical data for one coin."""
    fetcher = DataFetcher(client=_make_client())
    currency = args.vs

    # Single date snapshot
    if args.date:
        logger.info("Fetching snapshot for %s on %s...", args.id, args.date)
        snapshot = fetcher.fetch_snapshot(args.id, args.date, vs_currency=currency)

        _log_table(
            [
                [
                    snapshot.name,
                    snapshot.date,
                    format_usd(snapshot.price),
                    format_large_usd(snapshot.market_cap),
                    format_large_usd(snapshot.total_volume),
                ]
            ],
            ["Coin", "Date", f"Price ({currency.upper()})", "Market Cap", "24h Volume"],
        )
        _footer("Data from CoinGecko")

        if args.export:
            df = records_to_frame([snapshot.to_dict()], SNAPSHOT_EXPORT_COLUMNS)
            path = export_csv(df, args.export)
            logger.info("Data exported to %s", path)
        return 0

    # Relative days
    if args.days is not None:
        logger.info("Fetching %d-day market chart for %s...", args.days, args.id)
        chart = fetcher.fetch_market_chart(args.id, args.days, vs_currency=currency)
        _show_chart(chart, args.id, currency, args.export)
        return 0

    # Date range
    if args.from_date and args.to_date:
        logger.info(
            "Fetching market chart for %s from %s to %s...", args.id, args.from_date, args.to_date
        )
        chart = fetcher.fetch_market_chart_between(
            args.id,
            args.from_date,
            args.to_date,
            vs_currency=currency,
            show_progress=not args.quiet,
        )
        _show_chart(chart, args.id, currency, args.export)
        return 0

    logger.error("Please provide one of:")
    logger.info("  --date YYYY-MM-DD                  (single snapshot)")
    logger.info("  --days <n>                         (relative days back)")
    logger.info("  --from YYYY-MM-DD --to YYYY-MM-DD  (date range)")
    return 1


# =============================================================================
# Entry Point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all sub-commands."""
    parser = argparse.ArgumentParser(
        prog="geckocli",
        description="CoinGecko market data from the terminal",
    )

    # Global arguments
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress progress bars",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Log to file (in addition to console)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # auth command
    auth_parser = subparsers.add_parser(
        "auth",
        help="Save your CoinGecko API key and tier (demo/pro)",
    )
    auth_parser.add_argument("--key", help="Your CoinGecko API key")
    auth_parser.add_argument("--tier", help="Your plan tier: demo or pro")
    auth_parser.add_argument(
        "--clear",
        action="store_true",
        help="Remove the stored API key and tier",
    )

    # status command
    status_parser = subparsers.add_parser(
        "status",
        help="Show current auth configuration",
    )
    status_parser.add_argument(
        "--check",
        action="store_true",
        help="Also ping the API with the stored credentials",
    )

    # price command
    price_parser = subparsers.add_parser(
        "price",
        help="Get the current price of one or more coins",
    )
    price_parser.add_argument(
        "--ids",
        default=DEFAULT_COIN_IDS,
        help=f"Coin IDs, comma-separated (default: {DEFAULT_COIN_IDS})",
    )
    price_parser.add_argument(
        "--symbols",
        help="Coin symbols to resolve first (e.g. btc,eth)",
    )
    price_parser.add_argument(
        "--vs",
        default=DEFAULT_VS_CURRENCY,
        help=f"Quote currencies, comma-separated (default: {DEFAULT_VS_CURRENCY})",
    )

    # markets command
    markets_parser = subparsers.add_parser(
        "markets",
        help="List top coins by market cap",
    )
    markets_parser.add_argument(
        "--total",
        "-n",
        type=int,
        default=DEFAULT_MARKETS_TOTAL,
        help=f"Total number of coins to fetch (default: {DEFAULT_MARKETS_TOTAL})",
    )
    markets_parser.add_argument(
        "--vs",
        default=DEFAULT_VS_CURRENCY,
        help=f"Quote currency (default: {DEFAULT_VS_CURRENCY})",
    )
    markets_parser.add_argument(
        "--order",
        default=DEFAULT_MARKETS_ORDER,
        help=f"Sort order (default: {DEFAULT_MARKETS_ORDER})",
    )
    markets_parser.add_argument(
        "--export",
        type=Path,
        help="Export data to a CSV file",
    )

    # search command
    search_parser = subparsers.add_parser(
        "search",
        help="Search for coins",
    )
    search_parser.add_argument("query", help="Name or symbol to search for")
    search_parser.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_SEARCH_LIMIT,
        help=f"Max results to show (default: {DEFAULT_SEARCH_LIMIT})",
    )

    # trending command
    subparsers.add_parser(
        "trending",
        help="Show trending coins, NFTs, and categories (24h)",
    )

    # history command
    history_parser = subparsers.add_parser(
        "history",
        help="Get historical price data for a coin",
    )
    history_parser.add_argument("id", help="CoinGecko coin ID (e.g. bitcoin)")
    history_parser.add_argument(
        "--date",
        help="Single date snapshot, YYYY-MM-DD",
    )
    history_parser.add_argument(
        "--days",
        type=int,
        help="Relative days back",
    )
    history_parser.add_argument(
        "--from",
        dest="from_date",
        help="Range start date, YYYY-MM-DD",
    )
    history_parser.add_argument(
        "--to",
        dest="to_date",
        help="Range end date, YYYY-MM-DD",
    )
    history_parser.add_argument(
        "--vs",
        default=DEFAULT_VS_CURRENCY,
        help=f"Quote currency (default: {DEFAULT_VS_CURRENCY})",
    )
    history_parser.add_argument(
        "--export",
        type=Path,
        help="Export data to a CSV file",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging based on global args
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_logging(level=log_level, log_file=args.log_file, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    # Route to command handler
    commands = {
        "auth": cmd_auth,
        "status": cmd_status,
        "price": cmd_price,
        "markets": cmd_markets,
        "search": cmd_search,
        "trending": cmd_trending,
        "history": cmd_history,
    }

    handler = commands.get(args.command)
    if handler:
        try:
            return handler(args)
        except (CoinGeckoError, FetcherError) as e:
            logger.error("%s", e)
            return 1
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            return 130
        except Exception as e:
            logger.exception("Unexpected error: %s", e)
            return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
