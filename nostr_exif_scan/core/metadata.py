"""EXIF decoding of fetched image bytes."""

import io
from typing import Any

from PIL import ExifTags, Image, UnidentifiedImageError

# Decoded field name -> raw value (ints, rationals, tuples, strings, bytes)
DecodedMetadata = dict[str, Any]

# Names that differ from Pillow's tag table. Exiftool and most photo tools
# call the digitized timestamp "CreateDate".
_RENAMED_TAGS = {
    "DateTimeDigitized": "CreateDate",
}

# IFD pointer tags carry offsets, not values
_POINTER_TAGS = {
    ExifTags.Base.ExifOffset,
    ExifTags.Base.GPSInfo,
    ExifTags.Base.ExifInteroperabilityOffset,
}


class NoMetadataError(Exception):
    """Raised when image bytes carry no readable EXIF container."""
    pass


def _tag_name(tag_id: int, table: dict) -> str:
    name = table.get(tag_id, f"Tag0x{tag_id:04X}")
    return _RENAMED_TAGS.get(name, name)


def decode_metadata(data: bytes) -> DecodedMetadata:
    """Decode the EXIF container of an image into a flat field map.

    Reads the base IFD, the Exif sub-IFD and the GPS sub-IFD. GPS fields keep
    their raw rational triples; conversion happens in the classifier.

    Args:
        data: Raw image bytes (any format Pillow can open)

    Returns:
        Mapping from field name to raw value

    Raises:
        NoMetadataError: If the bytes are not an image or carry no EXIF fields
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            exif = img.getexif()
            fields: DecodedMetadata = {}

            for tag_id, value in exif.items():
                if tag_id in _POINTER_TAGS:
                    continue
                fields[_tag_name(tag_id, ExifTags.TAGS)] = value

            for tag_id, value in exif.get_ifd(ExifTags.IFD.Exif).items():
                if tag_id in _POINTER_TAGS:
                    continue
                fields[_tag_name(tag_id, ExifTags.TAGS)] = value

            for tag_id, value in exif.get_ifd(ExifTags.IFD.GPSInfo).items():
                fields[_tag_name(tag_id, ExifTags.GPSTAGS)] = value
    except UnidentifiedImageError as e:
        raise NoMetadataError(f"not a recognized image: {e}") from e
    except (OSError, SyntaxError, ValueError) as e:
        # Truncated or corrupt EXIF blocks surface as one of these
        raise NoMetadataError(f"unreadable metadata: {e}") from e

    if not fields:
        raise NoMetadataError("image has no EXIF fields")
    return fields
