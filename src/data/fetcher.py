"""
Data retrieval orchestration for geckocli.

Turns single-request API calls into complete datasets:
- Market listings larger than one page (250 entries) via sequential pages
- Historical ranges longer than 90 days via sequential windows
- Single-day snapshots and relative "last N days" charts

Every multi-request fetch is all-or-nothing: if request k of N fails the
error propagates and requests 1..k-1 are discarded.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone

from tqdm import tqdm

from api.coingecko import CoinGeckoClient, CoinGeckoError
from api.models import CoinSnapshot, MarketChart, MarketEntry
from config import (
    DEFAULT_MARKETS_ORDER,
    DEFAULT_VS_CURRENCY,
    MARKETS_PAGE_SIZE,
    MAX_RANGE_DAYS,
    SECONDS_PER_DAY,
)
from utils.logging import get_logger

# Module logger
logger = get_logger(__name__)

INPUT_DATE_FORMAT = "%Y-%m-%d"
API_DATE_FORMAT = "%d-%m-%Y"


class FetcherError(Exception):
    """Base exception for data fetcher errors."""

    pass


class InputError(FetcherError):
    """Raised for invalid caller input or an empty result set."""

    pass


@dataclass(frozen=True)
class ChunkWindow:
    """One sub-range of a historical query, inclusive at both ends (seconds)."""

    from_ts: int
    to_ts: int

    @property
    def days(self) -> float:
        return (self.to_ts - self.from_ts) / SECONDS_PER_DAY

    def describe(self) -> str:
        start = datetime.fromtimestamp(self.from_ts, tz=timezone.utc).date()
        end = datetime.fromtimestamp(self.to_ts, tz=timezone.utc).date()
        return f"{start} -> {end}"


def parse_date(value: str) -> date:
    """
    Parse a YYYY-MM-DD date.

    Raises:
        InputError: If the value is not a valid calendar date
    """
    try:
        return datetime.strptime(value.strip(), INPUT_DATE_FORMAT).date()
    except (AttributeError, ValueError) as e:
        raise InputError(f"Invalid date {value!r}. Use YYYY-MM-DD (e.g. 2024-01-15)") from e


def to_api_date(value: str) -> str:
    """Convert YYYY-MM-DD to the DD-MM-YYYY format of /coins/{id}/history."""
    return parse_date(value).strftime(API_DATE_FORMAT)


def parse_date_to_timestamp(value: str) -> int:
    """Convert YYYY-MM-DD to epoch seconds at UTC midnight."""
    day = parse_date(value)
    return int(datetime(day.year, day.month, day.day, tzinfo=timezone.utc).timestamp())


def plan_windows(
    from_ts: int,
    to_ts: int,
    max_window_days: int = MAX_RANGE_DAYS,
) -> list[ChunkWindow]:
    """
    Split [from_ts, to_ts] into request windows of at most max_window_days.

    A range no longer than max_window_days is a single window. Otherwise
    each window ends at min(start + span, to_ts) and the next one starts one
    second later, so windows never overlap and leave no gap.

    Raises:
        InputError: If from_ts is not earlier than to_ts
    """
    if from_ts >= to_ts:
        raise InputError("The range start must be earlier than its end")

    span = max_window_days * SECONDS_PER_DAY

    if to_ts - from_ts <= span:
        return [ChunkWindow(from_ts, to_ts)]

    windows = []
    chunk_from = from_ts
    while chunk_from < to_ts:
        chunk_to = min(chunk_from + span, to_ts)
        windows.append(ChunkWindow(chunk_from, chunk_to))
        chunk_from = chunk_to + 1

    return windows


class DataFetcher:
    """
    Orchestrates multi-request fetches against the CoinGecko API.

    Workflow:
    1. Validate input before any request is made
    2. Issue requests sequentially through the client
    3. Concatenate results in request order
    """

    def __init__(self, client: CoinGeckoClient | None = None):
        """
        Initialize the data fetcher.

        Args:
            client: CoinGecko API client (default: new unauthenticated instance)
        """
        self.client = client or CoinGeckoClient()

    def fetch_markets(
        self,
        total: int,
        vs_currency: str = DEFAULT_VS_CURRENCY,
        order: str = DEFAULT_MARKETS_ORDER,
        page_size: int = MARKETS_PAGE_SIZE,
        show_progress: bool = False,
    ) -> list[MarketEntry]:
        """
        Fetch the top `total` coins, paginating past the per-page cap.

        Every page is requested with the same per_page, so the last page can
        overshoot; the result is truncated to `total`. A page shorter than
        per_page means the listing is exhausted and stops the loop early.

        Args:
            total: Number of coins wanted (values below 1 are treated as 1)
            vs_currency: Quote currency for prices
            order: Sort order passed to the API
            page_size: API per-page cap
            show_progress: Show a progress bar when more than one page is needed

        Returns:
            MarketEntry list in listing order, at most `total` long

        Raises:
            InputError: If the API returned no entries at all
            CoinGeckoError: If any page request fails
        """
        total = max(1, int(total))
        pages_needed = math.ceil(total / page_size)
        per_page = min(page_size, total)

        if pages_needed > 1:
            logger.info("Fetching %d coins across %d pages...", total, pages_needed)
        else:
            logger.info("Fetching top %d coins by market cap...", total)

        entries: list[MarketEntry] = []
        pbar = None
        if show_progress and pages_needed > 1:
            pbar = tqdm(total=pages_needed, desc="Pages", leave=False)

        try:
            for page in range(1, pages_needed + 1):
                logger.debug("Requesting page %d of %d (per_page=%d)", page, pages_needed, per_page)
                page_entries = self.client.get_coins_markets(
                    vs_currency=vs_currency,
                    order=order,
                    per_page=per_page,
                    page=page,
                )
                entries.extend(page_entries)

                if pbar:
                    pbar.update(1)

                if len(page_entries) < per_page:
                    logger.debug("Page %d returned %d entries; listing exhausted", page, len(page_entries))
                    break
        except CoinGeckoError:
            logger.warning("Market listing aborted; discarding %d fetched entries", len(entries))
            raise
        finally:
            if pbar:
                pbar.close()

        entries = entries[:total]

        if not entries:
            raise InputError("No data returned")

        return entries

    def fetch_market_chart_range(
        self,
        coin_id: str,
        from_ts: int,
        to_ts: int,
        vs_currency: str = DEFAULT_VS_CURRENCY,
        max_window_days: int = MAX_RANGE_DAYS,
        show_progress: bool = False,
    ) -> MarketChart:
        """
        Fetch price, market cap and volume between two timestamps.

        Ranges longer than max_window_days are fetched window by window and
        stitched in window order. Points inside a window keep the API's
        order; boundary points may repeat between adjacent windows.

        Args:
            coin_id: CoinGecko coin ID
            from_ts: Range start (epoch seconds)
            to_ts: Range end (epoch seconds)
            vs_currency: Quote currency
            max_window_days: Longest span requested at once
            show_progress: Show a progress bar for chunked fetches

        Returns:
            Stitched MarketChart

        Raises:
            InputError: If from_ts >= to_ts (raised before any request)
            CoinGeckoError: If any window request fails
        """
        windows = plan_windows(from_ts, to_ts, max_window_days)

        if len(windows) == 1:
            window = windows[0]
            return self.client.get_coin_market_chart_range(
                coin_id, vs_currency, window.from_ts, window.to_ts
            )

        total_days = (to_ts - from_ts) / SECONDS_PER_DAY
        logger.info(
            "Range is %d days, fetching in %d chunks of <=%d days...",
            round(total_days),
            len(windows),
            max_window_days,
        )

        stitched = MarketChart()
        pbar = None
        if show_progress:
            pbar = tqdm(total=len(windows), desc="Chunks", leave=False)

        try:
            for index, window in enumerate(windows, start=1):
                logger.debug("Fetching chunk %d of %d (%s)", index, len(windows), window.describe())
                chunk = self.client.get_coin_market_chart_range(
                    coin_id, vs_currency, window.from_ts, window.to_ts
                )
                stitched.extend(chunk)

                if pbar:
                    pbar.update(1)
        except CoinGeckoError:
            logger.warning(
                "Chunk %d of %d failed; discarding %d fetched chunks",
                index,
                len(windows),
                index - 1,
            )
            raise
        finally:
            if pbar:
                pbar.close()

        logger.info("Stitched %d chunks into %d data points", len(windows), len(stitched.prices))
        return stitched

    def fetch_market_chart_between(
        self,
        coin_id: str,
        from_date: str,
        to_date: str,
        vs_currency: str = DEFAULT_VS_CURRENCY,
        show_progress: bool = False,
    ) -> MarketChart:
        """
        Fetch a date range given as YYYY-MM-DD strings (UTC midnight bounds).

        Raises:
            InputError: For malformed dates or from_date not before to_date
        """
        from_ts = parse_date_to_timestamp(from_date)
        to_ts = parse_date_to_timestamp(to_date)

        if from_ts >= to_ts:
            raise InputError("--from must be earlier than --to")

        return self.fetch_market_chart_range(
            coin_id,
            from_ts,
            to_ts,
            vs_currency=vs_currency,
            show_progress=show_progress,
        )

    def fetch_market_chart(
        self,
        coin_id: str,
        days: int,
        vs_currency: str = DEFAULT_VS_CURRENCY,
    ) -> MarketChart:
        """
        Fetch the last `days` days in a single request.

        Raises:
            InputError: If days is not a positive integer
        """
        if isinstance(days, bool) or not isinstance(days, int) or days < 1:
            raise InputError("--days must be a positive integer")

        return self.client.get_coin_market_chart(coin_id, vs_currency=vs_currency, days=days)

    def fetch_snapshot(
        self,
        coin_id: str,
        on_date: str,
        vs_currency: str = DEFAULT_VS_CURRENCY,
    ) -> CoinSnapshot:
        """
        Fetch a coin's market data on one day.

        Raises:
            InputError: For a malformed date, or when the API has no market
                data for that day (coin not yet listed)
        """
        api_date = to_api_date(on_date)

        snapshot = self.client.get_coin_snapshot(
            coin_id,
            on_date=on_date,
            api_date=api_date,
            vs_currency=vs_currency,
        )

        if not snapshot.has_market_data:
            raise InputError(
                f'No market data found for "{coin_id}" on {on_date}. '
                "The coin may not have existed yet, or data is unavailable for this date."
            )

        return snapshot
