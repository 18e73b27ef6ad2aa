"""Data models for posts, image references and scan results."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .classifier import SensitiveField


@dataclass(frozen=True)
class PostRecord:
    """A single text note fetched from a relay."""

    id: str  # hex event id
    content: str
    created_at: int  # unix seconds

    @property
    def created_at_dt(self) -> datetime:
        return datetime.fromtimestamp(self.created_at, tz=timezone.utc)

    @classmethod
    def from_event(cls, event: dict) -> "PostRecord":
        """Build a record from a raw relay event object."""
        return cls(
            id=event["id"],
            content=event.get("content", ""),
            created_at=int(event.get("created_at", 0)),
        )


@dataclass(frozen=True)
class ImageReference:
    """An image URL found in a post."""

    post_id: str
    url: str


@dataclass(frozen=True)
class GpsCoordinate:
    """One GPS axis in unsigned decimal degrees plus its hemisphere ref."""

    degrees: float
    ref: str = ""  # "N", "S", "E", "W" or empty

    @property
    def signed(self) -> float:
        if self.ref in ("S", "W"):
            return -abs(self.degrees)
        return abs(self.degrees)


@dataclass(frozen=True)
class GpsPoint:
    """Signed decimal-degree location."""

    lat: float
    lon: float


@dataclass(frozen=True)
class FieldReading:
    """A sensitive field found in an image, rendered for display."""

    field: "SensitiveField"
    display: str
    coordinate: Optional[GpsCoordinate] = None


@dataclass(frozen=True)
class Classification:
    """Outcome of checking one metadata map against the sensitive fields."""

    sensitive: bool
    latitude: Optional[GpsCoordinate] = None
    longitude: Optional[GpsCoordinate] = None
    readings: tuple[FieldReading, ...] = ()

    @property
    def gps(self) -> Optional[GpsPoint]:
        if self.latitude is None or self.longitude is None:
            return None
        return GpsPoint(lat=self.latitude.signed, lon=self.longitude.signed)


@dataclass(frozen=True)
class ScanResult:
    """Classification of one fetched and decoded image."""

    index: int  # 1-based issuance position
    post_id: str
    url: str
    sensitive: bool
    gps: Optional[GpsPoint] = None
    readings: tuple[FieldReading, ...] = ()


@dataclass
class ScanSummary:
    """Totals for a finished pipeline run."""

    total: int = 0
    results: list[ScanResult] = field(default_factory=list)  # issuance order
    fetch_failures: int = 0
    no_metadata: int = 0

    @property
    def flagged(self) -> list[ScanResult]:
        return [r for r in self.results if r.sensitive]

    @property
    def checked(self) -> int:
        return len(self.results)

    def __str__(self) -> str:
        lines = [f"Images checked: {self.checked}/{self.total}"]
        if self.flagged:
            lines.append(f"Flagged: {len(self.flagged)}")
        if self.fetch_failures:
            lines.append(f"Fetch failures: {self.fetch_failures}")
        if self.no_metadata:
            lines.append(f"Without metadata: {self.no_metadata}")
        return "\n".join(lines)
