"""Nostr EXIF Scan - find images that leak location and device metadata.

Package structure:
    nostr_exif_scan/
    ├── cli.py              # Command-line interface
    ├── config.py           # ScanConfig and relay list loading
    ├── core/               # Core scanning logic
    │   ├── models.py       # Data models (PostRecord, ScanResult, ...)
    │   ├── extractor.py    # Image URL extraction from post text
    │   ├── metadata.py     # EXIF decoding
    │   ├── classifier.py   # Sensitive field policy and GPS conversion
    │   ├── pipeline.py     # Concurrent fetch/decode/classify
    │   └── report.py       # Terminal rendering
    └── api/                # External integrations
        ├── fetcher.py      # HTTP image download
        ├── identity.py     # NIP-19 npub/nevent encoding
        └── relays.py       # Relay subscriptions
"""

from .core.models import (
    Classification,
    FieldReading,
    GpsCoordinate,
    GpsPoint,
    ImageReference,
    PostRecord,
    ScanResult,
    ScanSummary,
)
from .core.classifier import SENSITIVE_FIELDS, SensitiveField, classify
from .core.extractor import extract_image_references
from .core.metadata import NoMetadataError, decode_metadata
from .core.pipeline import AdmissionGate, Console, ScanPipeline, scan
from .config import ScanConfig, load_relays
from .api.fetcher import FetchError, ImageFetcher, ReadError
from .api.identity import IdentityDecodeError, decode_npub, encode_nevent
from .api.relays import PostFilter, RelayClient

__all__ = [
    # Core
    "Classification",
    "FieldReading",
    "GpsCoordinate",
    "GpsPoint",
    "ImageReference",
    "PostRecord",
    "ScanResult",
    "ScanSummary",
    "SENSITIVE_FIELDS",
    "SensitiveField",
    "classify",
    "extract_image_references",
    "NoMetadataError",
    "decode_metadata",
    "AdmissionGate",
    "Console",
    "ScanPipeline",
    "scan",
    # Config
    "ScanConfig",
    "load_relays",
    # API
    "FetchError",
    "ReadError",
    "ImageFetcher",
    "IdentityDecodeError",
    "decode_npub",
    "encode_nevent",
    "PostFilter",
    "RelayClient",
]
__version__ = "0.1.0"
