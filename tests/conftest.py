"""
Pytest configuration and fixtures for geckocli tests.
"""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (actual API calls)"
    )


def pytest_addoption(parser):
    """Add command line option for integration tests."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests that make actual API calls",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified."""
    if config.getoption("--run-integration"):
        os.environ["RUN_INTEGRATION_TESTS"] = "1"
        return

    skip_integration = pytest.mark.skip(reason="Use --run-integration to run API tests")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def mock_response():
    """Factory for fake requests.Response objects."""

    def _mock(status_code=200, json_data=None, reason="OK"):
        response = MagicMock()
        response.status_code = status_code
        response.reason = reason
        if isinstance(json_data, Exception):
            response.json.side_effect = json_data
            response.text = ""
        else:
            response.json.return_value = json_data if json_data is not None else {}
            response.text = str(json_data)
        return response

    return _mock


@pytest.fixture
def chart_payload():
    """Factory for market_chart payloads with `count` parallel points."""

    def _payload(start_ms: int, count: int, step_ms: int = 86_400_000, base: float = 1.0):
        timestamps = [start_ms + i * step_ms for i in range(count)]
        return {
            "prices": [[t, base + i] for i, t in enumerate(timestamps)],
            "market_caps": [[t, (base + i) * 1000] for i, t in enumerate(timestamps)],
            "total_volumes": [[t, (base + i) * 10] for i, t in enumerate(timestamps)],
        }

    return _payload
