"""
Logging configuration for geckocli.

Command output (tables, summaries) is emitted through the logger, so the
console handler prints INFO records bare and prefixes only warnings and
errors with their level.
"""

import logging
import sys
from pathlib import Path

# Format for the log file and for --verbose console output
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Console formats: plain output, labelled problems
CONSOLE_FORMAT = "%(message)s"
CONSOLE_PROBLEM_FORMAT = "%(levelname)s: %(message)s"

ROOT_LOGGER_NAME = "geckocli"

# Module-level logger cache
_loggers: dict[str, logging.Logger] = {}


class ConsoleFormatter(logging.Formatter):
    """Formatter that only labels records at WARNING and above."""

    def __init__(self) -> None:
        super().__init__(CONSOLE_FORMAT)
        self._problem_formatter = logging.Formatter(CONSOLE_PROBLEM_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            return self._problem_formatter.format(record)
        return super().format(record)


def setup_logging(
    level: int = logging.INFO,
    log_file: Path | None = None,
    verbose: bool = False,
) -> None:
    """
    Configure logging for the command line.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional path to log file
        verbose: If True, use DEBUG level and timestamped console format
    """
    if verbose:
        level = logging.DEBUG
        console_formatter = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)
    else:
        console_formatter = ConsoleFormatter()

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)  # File always gets request-level detail
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        root_logger.addHandler(file_handler)

    # Request URLs carry the query string; keep them out of normal output
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the geckocli namespace.

    Usage:
        from utils.logging import get_logger
        logger = get_logger(__name__)

        logger.info("Fetching page %d of %d", page, pages_needed)
        logger.warning("Symbol %s not found, skipping", symbol)

    Args:
        name: Module name (usually __name__)

    Returns:
        Logger instance
    """
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    if name not in _loggers:
        _loggers[name] = logging.getLogger(name)

    return _loggers[name]
