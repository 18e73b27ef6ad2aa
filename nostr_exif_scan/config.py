"""Scan configuration and relay list loading.

Environment variables (read after load_dotenv()):
    NOSTR_EXIF_RELAYS: Path to the relay list (default: relays.txt)
    NOSTR_EXIF_PERMALINK_BASE: Prefix for post links (default: https://primal.net/e/)
    NOSTR_EXIF_MAP_BASE: Prefix for map links (default: https://maps.google.com/?q=)

A relay list is either plain text with one URL per line, or a YAML file:

    relays:
      - wss://nos.lol
      - wss://relay.damus.io
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from .api.fetcher import DEFAULT_TIMEOUT as DEFAULT_FETCH_TIMEOUT, DEFAULT_USER_AGENT

MIN_CONCURRENCY = 1
MAX_CONCURRENCY = 32
DEFAULT_CONCURRENCY = 8
DEFAULT_LIMIT = 10000

DEFAULT_RELAYS_FILE = "relays.txt"
DEFAULT_RELAYS = [
    "wss://relay.nostr.band",
    "wss://nos.lol",
    "wss://relay.snort.social",
]
DEFAULT_PERMALINK_BASE = "https://primal.net/e/"
DEFAULT_MAP_BASE = "https://maps.google.com/?q="


@dataclass(frozen=True)
class ScanConfig:
    """Immutable settings for one pipeline run."""

    concurrency: int = DEFAULT_CONCURRENCY
    verbose: bool = False
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    color: bool = True
    show_progress: bool = False  # tqdm bar over completed images
    permalink_base: str = DEFAULT_PERMALINK_BASE
    map_base: str = DEFAULT_MAP_BASE
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        if not MIN_CONCURRENCY <= self.concurrency <= MAX_CONCURRENCY:
            raise ValueError(
                f"concurrency must be between {MIN_CONCURRENCY} and {MAX_CONCURRENCY}, "
                f"got {self.concurrency}"
            )
        if self.fetch_timeout <= 0:
            raise ValueError(f"fetch_timeout must be positive, got {self.fetch_timeout}")

    @classmethod
    def from_env(cls, **overrides) -> "ScanConfig":
        """Build a config with link prefixes taken from the environment."""
        values = {
            "permalink_base": os.environ.get("NOSTR_EXIF_PERMALINK_BASE", DEFAULT_PERMALINK_BASE),
            "map_base": os.environ.get("NOSTR_EXIF_MAP_BASE", DEFAULT_MAP_BASE),
        }
        values.update(overrides)
        return cls(**values)


def get_relays_path() -> str:
    """Relay list path from the environment."""
    return os.environ.get("NOSTR_EXIF_RELAYS", DEFAULT_RELAYS_FILE)


def _parse_relay_lines(text: str) -> list[str]:
    relays = []
    for line in text.splitlines():
        relay = line.strip()
        if relay and not relay.startswith("#"):
            relays.append(relay)
    return relays


def load_relays(path: str | Path = DEFAULT_RELAYS_FILE) -> list[str]:
    """Load relay URLs from a file, falling back to the built-in list.

    A missing or unreadable file yields DEFAULT_RELAYS. A readable file is
    used as is, even when it lists no relays.
    """
    path = Path(path)
    try:
        text = path.read_text()
    except OSError:
        return list(DEFAULT_RELAYS)

    if path.suffix.lower() in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
        relays = data.get("relays", []) if isinstance(data, dict) else data
        return [str(r).strip() for r in relays or [] if str(r).strip()]

    return _parse_relay_lines(text)
