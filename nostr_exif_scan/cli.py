"""Command-line interface: scan a Nostr user's images for leaking EXIF data.

Example:
    nostr-exif-scan --npub npub1... --threads 8 --limit 5000 \
        --since 2024-01-01T00:00:00Z --until 2025-01-01T00:00:00Z -v

Environment variables:
    NOSTR_EXIF_RELAYS: Relay list file (default: relays.txt)
    NOSTR_EXIF_PERMALINK_BASE: Prefix for post links
    NOSTR_EXIF_MAP_BASE: Prefix for map links
"""

import argparse
import sys
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv

from .api.identity import IdentityDecodeError, decode_npub
from .api.relays import PostFilter, RelayClient
from .config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_LIMIT,
    MAX_CONCURRENCY,
    MIN_CONCURRENCY,
    ScanConfig,
    get_relays_path,
    load_relays,
)
from .core.extractor import extract_image_references
from .core.pipeline import ScanPipeline
from .core.report import RED, colorize, render_header, render_link_count, render_summary


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def fail(message: str, color: bool = True) -> None:
    """Print an error line and exit with status 1."""
    print(colorize(f"❌ {message}", RED, color))
    sys.exit(1)


def parse_timestamp(value: str) -> int:
    """Parse an RFC3339 timestamp to unix seconds. Naive times are UTC.

    Raises:
        ValueError: If the value is not a valid timestamp
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def _optional_timestamp(value: Optional[str], flag: str, color: bool) -> Optional[int]:
    if not value:
        return None
    try:
        return parse_timestamp(value)
    except ValueError:
        fail(f"{flag} must be an RFC3339 timestamp, got {value!r}", color)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nostr-exif-scan",
        description="Scan a Nostr user's posted images for privacy-leaking EXIF metadata",
        epilog=(
            "Example: nostr-exif-scan --npub npub1... --threads 8 --limit 5000 "
            "--since 2024-01-01T00:00:00Z --until 2025-01-01T00:00:00Z -v"
        ),
    )
    parser.add_argument("--npub", default="", help="npub1... public key (required)")
    parser.add_argument(
        "--threads",
        type=int,
        default=DEFAULT_CONCURRENCY,
        help=f"Number of parallel workers (max {MAX_CONCURRENCY}, default: {DEFAULT_CONCURRENCY})",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_LIMIT,
        help=f"Maximum number of events to fetch (default: {DEFAULT_LIMIT})",
    )
    parser.add_argument("--since", default="", help="Only fetch events after this RFC3339 timestamp")
    parser.add_argument("--until", default="", help="Only fetch events before this RFC3339 timestamp")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output: show full EXIF details")
    parser.add_argument("--relays", default=None, help="Relay list file (default: $NOSTR_EXIF_RELAYS or relays.txt)")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar while scanning")
    return parser


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> None:
    load_dotenv()
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        parser.print_help()
        sys.exit(1)

    args = parser.parse_args(argv)
    color = not args.no_color

    if not args.npub:
        fail("Please provide --npub", color)
    if not MIN_CONCURRENCY <= args.threads <= MAX_CONCURRENCY:
        fail(f"--threads must be between {MIN_CONCURRENCY} and {MAX_CONCURRENCY}", color)
    if args.limit < 1:
        fail("--limit must be at least 1", color)

    try:
        pubkey = decode_npub(args.npub)
    except IdentityDecodeError as e:
        fail(f"Invalid npub: {e}", color)

    since = _optional_timestamp(args.since, "--since", color)
    until = _optional_timestamp(args.until, "--until", color)

    config = ScanConfig.from_env(
        concurrency=args.threads,
        verbose=args.verbose,
        color=color,
        show_progress=args.progress,
    )

    relays = load_relays(args.relays or get_relays_path())
    client = RelayClient(relays)
    posts = client.fetch_posts(pubkey, PostFilter(limit=args.limit, since=since, until=until))

    if args.verbose:
        for url, error in client.failed_relays.items():
            print(f"⚠️  Relay {url} failed: {error}")

    for line in render_header(posts, color):
        print(line)
    if not posts:
        return

    references = extract_image_references(posts)
    print(render_link_count(len(references), color))

    summary = ScanPipeline(config).run(references)
    print(render_summary(summary, color))


if __name__ == "__main__":
    main()
