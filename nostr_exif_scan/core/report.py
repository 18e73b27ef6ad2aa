"""Human-readable rendering of scan progress and findings."""

from typing import Optional, Sequence

from ..api.identity import encode_nevent
from .models import FieldReading, GpsPoint, PostRecord, ScanResult, ScanSummary

RED = "31"
CYAN = "36"
UNDERLINE = "4"


def colorize(text: str, code: str, enabled: bool = True) -> str:
    """Wrap text in an ANSI escape sequence when colors are enabled."""
    if not enabled:
        return text
    return f"\033[{code}m{text}\033[0m"


def permalink(post_id: str, base: str) -> str:
    """Shareable link to a post, built from its nevent reference.

    Ids that are not 32-byte hex are linked as given.
    """
    try:
        reference = encode_nevent(post_id)
    except ValueError:
        reference = post_id
    return f"{base}{reference}"


def render_header(posts: Sequence[PostRecord], color: bool = True) -> list[str]:
    """Post count and date range. Posts need not be sorted."""
    if not posts:
        return ["ℹ️  No posts found."]
    oldest = min(p.created_at_dt for p in posts)
    newest = max(p.created_at_dt for p in posts)
    return [
        f"📚 Total posts: {colorize(str(len(posts)), CYAN, color)}",
        f"📅 Oldest post: {colorize(_rfc3339(oldest), CYAN, color)}",
        f"📅 Newest post: {colorize(_rfc3339(newest), CYAN, color)}",
    ]


def _rfc3339(dt) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def render_link_count(count: int, color: bool = True) -> str:
    return f"📸 Found {colorize(str(count), CYAN, color)} image links"


def render_progress(index: int, total: int, url: str, color: bool = True) -> str:
    return f"[{index}/{total}] 🔎 Checking {colorize(url, CYAN, color)}"


def render_fetch_failure(url: str, color: bool = True) -> str:
    return f"    ❌ Failed to fetch {colorize(url, RED, color)}"


def render_read_failure(url: str, color: bool = True) -> str:
    return f"    ❌ Read failed for {colorize(url, RED, color)}"


def render_flagged(result: ScanResult, base: str, color: bool = True) -> str:
    link = permalink(result.post_id, base)
    return (
        f"🚨 {colorize('Sensitive EXIF found', RED, color)} in post: "
        f"{colorize(link, UNDERLINE, color)}"
    )


def render_reading(reading: FieldReading) -> str:
    return f"    ➕ {reading.field.value}: {reading.display}"


def format_coordinates(point: GpsPoint) -> str:
    """Signed "lat,lon" with 6 decimal places."""
    return f"{point.lat:.6f},{point.lon:.6f}"


def render_map_link(point: GpsPoint, base: str) -> str:
    return f"    🌍 GPS: {base}{format_coordinates(point)}"


def render_finding(
    result: ScanResult,
    permalink_base: str,
    map_base: str,
    verbose: bool = False,
    color: bool = True,
) -> list[str]:
    """All lines for one flagged result: field details, post link, map link."""
    lines = []
    if verbose:
        lines.extend(render_reading(r) for r in result.readings)
    lines.append(render_flagged(result, permalink_base, color))
    if verbose and result.gps is not None:
        lines.append(render_map_link(result.gps, map_base))
    return lines


def render_summary(summary: ScanSummary, color: bool = True) -> str:
    flagged = len(summary.flagged)
    count = colorize(str(flagged), RED if flagged else CYAN, color)
    text = f"✅ Scan complete: {summary.checked}/{summary.total} images checked, {count} flagged"
    skipped = _skipped_note(summary)
    return f"{text} ({skipped})" if skipped else text


def _skipped_note(summary: ScanSummary) -> Optional[str]:
    parts = []
    if summary.fetch_failures:
        parts.append(f"{summary.fetch_failures} failed")
    if summary.no_metadata:
        parts.append(f"{summary.no_metadata} without metadata")
    return ", ".join(parts) or None
