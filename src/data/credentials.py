"""
Persistent storage for the CoinGecko API key and tier.

The file is written by `geckocli auth` and read once per command; the API
client only ever sees the resulting Credentials value.
"""

import json
from pathlib import Path

from api.coingecko import Credentials, Tier
from config import CREDENTIALS_FILE
from utils.logging import get_logger

logger = get_logger(__name__)


class CredentialStore:
    """
    JSON file holding {"apiKey": ..., "tier": ...}.

    Usage:
        store = CredentialStore()
        store.save("CG-abc123", Tier.PRO)
        credentials = store.load()
    """

    def __init__(self, path: Path = CREDENTIALS_FILE):
        """
        Initialize the credential store.

        Args:
            path: Path to the JSON config file
        """
        self.path = path

    def _read(self) -> dict:
        """Read the raw config; a missing or unreadable file is empty."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable config file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> Credentials:
        """Load stored credentials (unauthenticated demo when nothing is stored)."""
        data = self._read()
        api_key = data.get("apiKey") or None
        return Credentials(api_key=api_key, tier=Tier.parse(data.get("tier")))

    def save(self, api_key: str, tier: Tier | str) -> Path:
        """Persist the API key and tier, replacing any previous values."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        data = self._read()
        data["apiKey"] = api_key
        data["tier"] = Tier.parse(tier).value

        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

        logger.debug("Saved credentials to %s", self.path)
        return self.path

    def clear(self) -> bool:
        """Delete the stored credentials. Returns True if a file was removed."""
        if not self.path.exists():
            return False
        self.path.unlink()
        return True
