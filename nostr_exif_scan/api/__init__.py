"""External integrations - image download, NIP-19 encoding, relay client."""

from .fetcher import FetchError, ImageFetcher, ReadError
from .identity import IdentityDecodeError, decode_npub, encode_nevent

__all__ = [
    "FetchError",
    "ReadError",
    "ImageFetcher",
    "IdentityDecodeError",
    "decode_npub",
    "encode_nevent",
]
