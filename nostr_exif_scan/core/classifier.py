"""Sensitive-field policy for decoded image metadata.

The policy is a fixed, ordered list of EXIF fields that can identify a person,
a place or a device. Classification visits every field in that order, so the
verbose output is stable regardless of how the decoder ordered its map.
"""

import numbers
from enum import Enum
from typing import Any, Mapping, Optional

from .models import Classification, FieldReading, GpsCoordinate


class SensitiveField(str, Enum):
    """Metadata fields considered privacy-sensitive, in reporting order."""

    GPS_LATITUDE = "GPSLatitude"
    GPS_LONGITUDE = "GPSLongitude"
    GPS_ALTITUDE = "GPSAltitude"
    GPS_TIMESTAMP = "GPSTimeStamp"
    GPS_DATESTAMP = "GPSDateStamp"
    GPS_IMG_DIRECTION = "GPSImgDirection"
    MODEL = "Model"
    MAKE = "Make"
    DATETIME_ORIGINAL = "DateTimeOriginal"
    CREATE_DATE = "CreateDate"
    SOFTWARE = "Software"
    LENS_MODEL = "LensModel"
    LENS_MAKE = "LensMake"

    @property
    def ref_field(self) -> Optional[str]:
        """Name of the hemisphere companion field, for the two coordinate axes."""
        if self in GPS_COORDINATE_FIELDS:
            return self.value + "Ref"
        return None


SENSITIVE_FIELDS: tuple[SensitiveField, ...] = tuple(SensitiveField)
GPS_COORDINATE_FIELDS = frozenset({SensitiveField.GPS_LATITUDE, SensitiveField.GPS_LONGITUDE})


def rational_to_float(value: Any) -> float:
    """Convert one rational (object, (num, den) pair or plain number) to float.

    Raises:
        ValueError: If the value is not a usable rational (zero denominator,
            wrong shape, non-numeric parts)
    """
    if hasattr(value, "numerator") and hasattr(value, "denominator"):
        num, den = value.numerator, value.denominator
    elif isinstance(value, (tuple, list)) and len(value) == 2:
        num, den = value
    elif isinstance(value, numbers.Real) and not isinstance(value, bool):
        return float(value)
    else:
        raise ValueError(f"not a rational: {value!r}")

    if not isinstance(num, numbers.Real) or not isinstance(den, numbers.Real):
        raise ValueError(f"non-numeric rational: {value!r}")
    if den == 0:
        raise ValueError(f"zero denominator: {value!r}")
    return float(num) / float(den)


def dms_to_degrees(value: Any) -> float:
    """Convert a (degrees, minutes, seconds) rational triple to decimal degrees."""
    if not isinstance(value, (tuple, list)) or len(value) != 3:
        raise ValueError(f"expected a rational triple, got {value!r}")
    degrees, minutes, seconds = (rational_to_float(part) for part in value)
    return degrees + minutes / 60 + seconds / 3600


def signed_degrees(value: float, ref: str) -> float:
    """Apply the hemisphere sign: S and W are negative, anything else positive."""
    return GpsCoordinate(degrees=value, ref=ref).signed


def normalize_ref(value: Any) -> str:
    """Hemisphere reference as a bare upper-case letter, or ''."""
    if value is None:
        return ""
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    return str(value).strip("\x00 ").upper()


def display_value(value: Any) -> str:
    """String form of a raw metadata value for verbose output."""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace").strip("\x00 ")
    if isinstance(value, numbers.Integral):
        return str(value)
    if isinstance(value, (tuple, list)):
        return " ".join(display_value(v) for v in value)
    if hasattr(value, "numerator") and hasattr(value, "denominator"):
        try:
            return f"{rational_to_float(value):g}"
        except ValueError:
            return f"{value.numerator}/{value.denominator}"
    return str(value).strip("\x00 ")


def classify(metadata: Mapping[str, Any]) -> Classification:
    """Check a decoded metadata map against the sensitive field list.

    Every field is visited; the first hit does not end the pass.

    Args:
        metadata: Field name -> raw value, as produced by the decoder

    Returns:
        Classification with the sensitive flag, any derived coordinates and
        one reading per present field in SENSITIVE_FIELDS order
    """
    sensitive = False
    latitude: Optional[GpsCoordinate] = None
    longitude: Optional[GpsCoordinate] = None
    readings: list[FieldReading] = []

    for field in SENSITIVE_FIELDS:
        if field.value not in metadata:
            continue
        raw = metadata[field.value]
        sensitive = True

        if field in GPS_COORDINATE_FIELDS:
            ref = normalize_ref(metadata.get(field.ref_field))
            try:
                coordinate = GpsCoordinate(degrees=dms_to_degrees(raw), ref=ref)
            except (ValueError, TypeError):
                # Unparseable triple: still sensitive, just no coordinate
                readings.append(FieldReading(field=field, display=display_value(raw)))
                continue
            if field is SensitiveField.GPS_LATITUDE:
                latitude = coordinate
            else:
                longitude = coordinate
            readings.append(FieldReading(
                field=field,
                display=f"{coordinate.degrees:.6f}° ({ref})",
                coordinate=coordinate,
            ))
            continue

        readings.append(FieldReading(field=field, display=display_value(raw)))

    return Classification(
        sensitive=sensitive,
        latitude=latitude,
        longitude=longitude,
        readings=tuple(readings),
    )
