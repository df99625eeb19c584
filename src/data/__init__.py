"""
Data retrieval orchestration, credentials and export.
"""

from .credentials import CredentialStore
from .export import chart_to_frame, export_csv, market_entries_to_frame
from .fetcher import (
    ChunkWindow,
    DataFetcher,
    FetcherError,
    InputError,
    plan_windows,
    to_api_date,
)
from .symbols import SymbolResolver

__all__ = [
    "CredentialStore",
    "ChunkWindow",
    "DataFetcher",
    "FetcherError",
    "InputError",
    "SymbolResolver",
    "chart_to_frame",
    "export_csv",
    "market_entries_to_frame",
    "plan_windows",
    "to_api_date",
]
