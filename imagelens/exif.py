"""EXIF tag decoding on top of Pillow."""

import io
import logging
from typing import Any, Protocol

from PIL import Image, UnidentifiedImageError
from PIL.ExifTags import GPSTAGS, IFD, TAGS

from imagelens.schemas.metadata import ExifTag

logger = logging.getLogger(__name__)

# IFD0 entries that only point at sub-IFDs
_POINTER_TAGS = {0x8769, 0x8825, 0xA005}


class ExifDecodeError(Exception):
    """The bytes could not be read as an image with a tag container."""


class TagDecoder(Protocol):
    def decode(self, data: bytes) -> dict[str, ExifTag]: ...


def _format_number(value: float) -> str:
    """Render a float without trailing zeros (2.80 -> "2.8", 50.0 -> "50")."""
    return f"{value:.4f}".rstrip("0").rstrip(".")


def _to_float(value: Any) -> float | None:
    if hasattr(value, "numerator") and hasattr(value, "denominator"):
        if value.denominator == 0:
            return None
        return value.numerator / value.denominator
    if isinstance(value, (int, float)):
        return float(value)
    return None


def _dms_to_decimal(value: Any) -> float | None:
    """Convert a (degrees, minutes, seconds) triplet to decimal degrees."""
    if not isinstance(value, tuple) or len(value) != 3:
        return None
    parts = [_to_float(part) for part in value]
    if any(part is None for part in parts):
        return None
    degrees, minutes, seconds = parts
    return degrees + minutes / 60 + seconds / 3600


def _describe_bytes(value: bytes) -> str:
    stripped = value.rstrip(b"\x00")
    if stripped and all(32 <= b <= 126 or b in (9, 10, 13) for b in stripped):
        return stripped.decode("ascii")
    return f"<{len(value)} bytes>"


def _describe_value(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return _describe_bytes(value)
    if isinstance(value, str):
        return value.rstrip("\x00").strip()
    if isinstance(value, tuple):
        parts = [_describe_value(part) for part in value]
        return ", ".join(part for part in parts if part is not None)
    number = _to_float(value)
    if number is not None:
        if isinstance(value, int):
            return str(value)
        return _format_number(number)
    return str(value)


def describe_tag(name: str, value: Any) -> str | None:
    """Human-readable description for a decoded tag value."""
    if name == "ExposureTime":
        seconds = _to_float(value)
        if seconds is None:
            return _describe_value(value)
        if 0 < seconds < 1:
            return f"1/{round(1 / seconds)}"
        return _format_number(seconds)
    if name == "FNumber":
        number = _to_float(value)
        return _format_number(number) if number is not None else _describe_value(value)
    if name == "FocalLength":
        number = _to_float(value)
        return f"{_format_number(number)} mm" if number is not None else _describe_value(value)
    if name in ("GPSLatitude", "GPSLongitude"):
        degrees = _dms_to_decimal(value)
        return _format_number(degrees) if degrees is not None else _describe_value(value)
    if name == "GPSAltitude":
        metres = _to_float(value)
        return f"{_format_number(metres)} m" if metres is not None else _describe_value(value)
    return _describe_value(value)


def _add_tags(tags: dict[str, ExifTag], entries: dict, names: dict) -> None:
    for tag_id, value in entries.items():
        if tag_id in _POINTER_TAGS and names is TAGS:
            continue
        name = names.get(tag_id, str(tag_id))
        if name in tags:
            continue
        tags[name] = ExifTag(description=describe_tag(name, value))


class PillowTagDecoder:
    """Reads IFD0, the Exif sub-IFD and the GPS IFD with Pillow."""

    def decode(self, data: bytes) -> dict[str, ExifTag]:
        try:
            with Image.open(io.BytesIO(data)) as img:
                exif = img.getexif()
                tags: dict[str, ExifTag] = {}
                _add_tags(tags, dict(exif.items()), TAGS)
                _add_tags(tags, exif.get_ifd(IFD.Exif), TAGS)
                _add_tags(tags, exif.get_ifd(IFD.GPSInfo), GPSTAGS)
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            raise ExifDecodeError(f"Could not decode tags: {e}") from e

        logger.debug(f"Decoded {len(tags)} EXIF tags")
        return tags
