"""
Utility modules for geckocli.
"""

from .formatting import format_change, format_large_usd, format_usd, mask_api_key
from .logging import get_logger, setup_logging

__all__ = [
    "format_change",
    "format_large_usd",
    "format_usd",
    "get_logger",
    "mask_api_key",
    "setup_logging",
]
