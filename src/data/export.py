"""
CSV export of fetched datasets.

Records go through a pandas DataFrame so column order and labels are fixed
by the caller, independent of dict ordering in the records.
"""

from pathlib import Path
from typing import Any

import pandas as pd

from api.models import MarketChart, MarketEntry

# (column label in the CSV, record key)
MARKETS_EXPORT_COLUMNS = [
    ("Rank", "market_cap_rank"),
    ("Name", "name"),
    ("Symbol", "symbol"),
    ("Price", "current_price"),
    ("24h Change%", "price_change_percentage_24h"),
    ("Market Cap", "market_cap"),
    ("24h Volume", "total_volume"),
]

CHART_EXPORT_COLUMNS = ["datetime", "price", "market_cap", "total_volume"]
SNAPSHOT_EXPORT_COLUMNS = ["date", "price", "market_cap", "total_volume"]


def records_to_frame(
    records: list[dict[str, Any]],
    columns: list[str],
    headers: list[str] | None = None,
) -> pd.DataFrame:
    """
    Build a DataFrame with exactly the given columns, in order.

    Args:
        records: Row dictionaries; missing keys become empty cells
        columns: Record keys to keep
        headers: Optional CSV labels, one per column
    """
    df = pd.DataFrame.from_records(records, columns=columns)
    if headers is not None:
        df.columns = headers
    return df


def market_entries_to_frame(entries: list[MarketEntry]) -> pd.DataFrame:
    """Tabulate a market listing with the export column labels."""
    labels = [label for label, _ in MARKETS_EXPORT_COLUMNS]
    keys = [key for _, key in MARKETS_EXPORT_COLUMNS]
    return records_to_frame([entry.to_dict() for entry in entries], keys, labels)


def chart_to_frame(chart: MarketChart) -> pd.DataFrame:
    """Tabulate a market chart as one row per price point."""
    return records_to_frame(chart.to_records(), CHART_EXPORT_COLUMNS)


def export_csv(df: pd.DataFrame, path: Path) -> Path:
    """
    Write a DataFrame to CSV without the index.

    Returns:
        Path of the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return path
