"""Tests for EXIF decoding with Pillow-generated images."""

import io

import pytest
from PIL import ExifTags, Image

from nostr_exif_scan.core.classifier import SensitiveField, classify
from nostr_exif_scan.core.metadata import NoMetadataError, _tag_name, decode_metadata


def _image_bytes(fmt: str, exif: Image.Exif | None = None) -> bytes:
    buf = io.BytesIO()
    img = Image.new("RGB", (8, 8), "white")
    if exif is not None:
        img.save(buf, format=fmt, exif=exif)
    else:
        img.save(buf, format=fmt)
    return buf.getvalue()


def test_decodes_camera_fields():
    exif = Image.Exif()
    exif[ExifTags.Base.Make] = "Canon"
    exif[ExifTags.Base.Model] = "EOS 5D"
    exif[ExifTags.Base.Software] = "GIMP 2.10"

    fields = decode_metadata(_image_bytes("JPEG", exif))

    assert "Make" in fields and "Model" in fields and "Software" in fields
    result = classify(fields)
    assert result.sensitive is True
    shown = {r.field: r.display for r in result.readings}
    assert shown[SensitiveField.MAKE] == "Canon"
    assert shown[SensitiveField.MODEL] == "EOS 5D"


def test_harmless_exif_is_not_sensitive():
    exif = Image.Exif()
    exif[ExifTags.Base.Orientation] = 1

    fields = decode_metadata(_image_bytes("JPEG", exif))

    assert fields["Orientation"] == 1
    assert classify(fields).sensitive is False


def test_image_without_exif():
    with pytest.raises(NoMetadataError):
        decode_metadata(_image_bytes("PNG"))


def test_plain_jpeg_without_exif():
    with pytest.raises(NoMetadataError):
        decode_metadata(_image_bytes("JPEG"))


def test_not_an_image():
    with pytest.raises(NoMetadataError):
        decode_metadata(b"<html>not found</html>")


def test_empty_bytes():
    with pytest.raises(NoMetadataError):
        decode_metadata(b"")


def test_gps_ifd_yields_signed_point():
    exif = Image.Exif()
    exif[ExifTags.Base.Make] = "Apple"
    exif[ExifTags.IFD.GPSInfo] = {
        ExifTags.GPS.GPSLatitudeRef: "S",
        ExifTags.GPS.GPSLatitude: (40, 30, 0),
        ExifTags.GPS.GPSLongitudeRef: "W",
        ExifTags.GPS.GPSLongitude: (73, 0, 0),
    }

    fields = decode_metadata(_image_bytes("JPEG", exif))

    assert fields["GPSLatitudeRef"] == "S"
    assert "GPSInfo" not in fields
    result = classify(fields)
    assert result.sensitive is True
    assert result.gps is not None
    assert result.gps.lat == pytest.approx(-40.5)
    assert result.gps.lon == pytest.approx(-73.0)


def test_sub_ifd_pointers_are_not_fields():
    exif = Image.Exif()
    exif[ExifTags.Base.Make] = "Canon"
    exif[ExifTags.IFD.Exif] = {ExifTags.Base.DateTimeOriginal: "2024:05:01 10:00:00"}

    fields = decode_metadata(_image_bytes("JPEG", exif))

    assert fields["DateTimeOriginal"] == "2024:05:01 10:00:00"
    assert "ExifInteroperabilityOffset" not in fields
    assert "ExifOffset" not in fields


def test_digitized_time_is_create_date():
    assert _tag_name(0x9004, ExifTags.TAGS) == "CreateDate"
    assert _tag_name(0x9003, ExifTags.TAGS) == "DateTimeOriginal"
    assert _tag_name(0x0002, ExifTags.GPSTAGS) == "GPSLatitude"


def test_unknown_tag_gets_hex_name():
    assert _tag_name(0xFFFE, {}) == "Tag0xFFFE"
