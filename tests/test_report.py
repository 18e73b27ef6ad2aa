"""Tests for terminal rendering."""

from nostr_exif_scan.api.identity import decode_nevent
from nostr_exif_scan.core.classifier import SensitiveField
from nostr_exif_scan.core.models import (
    FieldReading,
    GpsPoint,
    PostRecord,
    ScanResult,
    ScanSummary,
)
from nostr_exif_scan.core.report import (
    colorize,
    format_coordinates,
    permalink,
    render_fetch_failure,
    render_finding,
    render_header,
    render_link_count,
    render_map_link,
    render_progress,
    render_read_failure,
    render_summary,
)

POST_ID = "b9f5441e45ca39179320e0031cfb18e34078673dcc3d3e3a3b3a981760aa5696"
MAPS = "https://maps.google.com/?q="


def _result(**kwargs) -> ScanResult:
    values = dict(index=1, post_id=POST_ID, url="https://x.test/a.jpg", sensitive=True)
    values.update(kwargs)
    return ScanResult(**values)


# ── Links ────────────────────────────────────────────────────────────

def test_permalink_uses_nevent():
    link = permalink(POST_ID, "https://primal.net/e/")
    assert link.startswith("https://primal.net/e/nevent1")
    assert decode_nevent(link.rsplit("/", 1)[1]) == POST_ID


def test_permalink_falls_back_to_raw_id():
    assert permalink("p1", "https://primal.net/e/") == "https://primal.net/e/p1"


def test_coordinates_six_places_signed():
    assert format_coordinates(GpsPoint(lat=-40.0, lon=12.5)) == "-40.000000,12.500000"
    assert format_coordinates(GpsPoint(lat=51.5000004, lon=-0.1234567)) == "51.500000,-0.123457"


def test_map_link():
    line = render_map_link(GpsPoint(lat=-33.8688, lon=151.2093), MAPS)
    assert line == "    🌍 GPS: https://maps.google.com/?q=-33.868800,151.209300"


# ── Lines ────────────────────────────────────────────────────────────

def test_colorize():
    assert colorize("x", "31") == "\033[31mx\033[0m"
    assert colorize("x", "31", enabled=False) == "x"


def test_progress_line():
    assert render_progress(3, 10, "https://x.test/a.jpg", color=False) == \
        "[3/10] 🔎 Checking https://x.test/a.jpg"


def test_failure_lines_name_the_stage():
    url = "https://x.test/a.jpg"
    assert render_fetch_failure(url, color=False) == f"    ❌ Failed to fetch {url}"
    assert render_read_failure(url, color=False) == f"    ❌ Read failed for {url}"


def test_link_count():
    assert render_link_count(7, color=False) == "📸 Found 7 image links"


def test_header_date_range():
    posts = [
        PostRecord(id="b", content="", created_at=1735689600),  # 2025-01-01
        PostRecord(id="a", content="", created_at=1704067200),  # 2024-01-01
    ]
    assert render_header(posts, color=False) == [
        "📚 Total posts: 2",
        "📅 Oldest post: 2024-01-01T00:00:00Z",
        "📅 Newest post: 2025-01-01T00:00:00Z",
    ]


def test_header_without_posts():
    assert render_header([], color=False) == ["ℹ️  No posts found."]


def test_finding_verbose_order():
    readings = (
        FieldReading(field=SensitiveField.MODEL, display="EOS 5D"),
        FieldReading(field=SensitiveField.MAKE, display="Canon"),
    )
    lines = render_finding(
        _result(readings=readings, gps=GpsPoint(lat=1.0, lon=-2.0)),
        permalink_base="https://primal.net/e/",
        map_base=MAPS,
        verbose=True,
        color=False,
    )
    assert lines[0] == "    ➕ Model: EOS 5D"
    assert lines[1] == "    ➕ Make: Canon"
    assert lines[2].startswith("🚨 Sensitive EXIF found in post: https://primal.net/e/nevent1")
    assert lines[3] == "    🌍 GPS: https://maps.google.com/?q=1.000000,-2.000000"


def test_finding_quiet():
    lines = render_finding(
        _result(gps=GpsPoint(lat=1.0, lon=2.0)),
        permalink_base="https://primal.net/e/",
        map_base=MAPS,
        verbose=False,
        color=False,
    )
    assert len(lines) == 1


def test_summary_line():
    summary = ScanSummary(
        total=5,
        results=[_result(index=1), _result(index=2, sensitive=False)],
        fetch_failures=2,
        no_metadata=1,
    )
    assert render_summary(summary, color=False) == \
        "✅ Scan complete: 2/5 images checked, 1 flagged (2 failed, 1 without metadata)"
    assert "Flagged: 1" in str(summary)
