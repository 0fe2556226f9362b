"""Metadata normalization: raw image bytes -> flat MetadataRecord."""

import asyncio
import io
import json
import logging
import re
from datetime import datetime
from typing import Any

from PIL import Image

from imagelens.config import REVERSE_GEOCODE
from imagelens.exif import PillowTagDecoder, TagDecoder
from imagelens.geocode import reverse_geocode
from imagelens.schemas.metadata import ExifTag, ExtraValue, MetadataRecord

logger = logging.getLogger(__name__)

SIZE_UNITS = ("Bytes", "KB", "MB", "GB")

MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

EXIF_DATE_RE = re.compile(r"^(\d{4}):(\d{2}):(\d{2})\s(\d{2}):(\d{2}):(\d{2})$")
_FLOAT_PREFIX_RE = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_INT_PREFIX_RE = re.compile(r"^\s*[-+]?\d+")

# Decoder tags that map onto well-known record fields
TIMESTAMP_TAGS = ("DateTime", "DateTimeOriginal")
CAPTURED_TAGS = {
    "Make",
    "Model",
    "ExposureTime",
    "FNumber",
    "ISOSpeedRatings",
    "FocalLength",
    "GPSLatitude",
    "GPSLatitudeRef",
    "GPSLongitude",
    "GPSLongitudeRef",
    "GPSAltitude",
    "ImageWidth",
    "ImageHeight",
}


def format_file_size(size_bytes: int) -> str:
    """Format a byte count with base-1024 units, e.g. 1536 -> "1.5 KB"."""
    if size_bytes == 0:
        return "0 Bytes"

    index = 0
    value = float(size_bytes)
    while value >= 1024 and index < len(SIZE_UNITS) - 1:
        value /= 1024
        index += 1

    # 1023.999 KB would round to "1024 KB"; carry into the next unit instead
    if round(value, 2) >= 1024 and index < len(SIZE_UNITS) - 1:
        value /= 1024
        index += 1

    rendered = f"{round(value, 2):.2f}".rstrip("0").rstrip(".")
    return f"{rendered} {SIZE_UNITS[index]}"


def format_exif_date(date_string: str) -> str:
    """Reformat an EXIF timestamp ("YYYY:MM:DD HH:MM:SS") for display.

    Returns the input unchanged when it does not match the EXIF layout or
    holds an impossible date.
    """
    if not date_string:
        return ""

    match = EXIF_DATE_RE.match(date_string)
    if not match:
        return date_string

    try:
        parsed = datetime(*(int(part) for part in match.groups()))
    except ValueError as e:
        logger.warning(f"Error formatting date {date_string!r}: {e}")
        return date_string

    # Fixed en-US rendering, independent of the process locale
    hour = parsed.hour % 12 or 12
    period = "AM" if parsed.hour < 12 else "PM"
    return (
        f"{MONTHS[parsed.month - 1]} {parsed.day}, {parsed.year}, "
        f"{hour:02d}:{parsed.minute:02d} {period}"
    )


def safe_value(value: Any) -> ExtraValue:
    """Coerce any value to a str/int/float primitive or None."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return value
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value, default=str)
        except (TypeError, ValueError):
            return str(value)
    return str(value)


def parse_float(value: Any) -> float | None:
    """Parse the leading decimal number of a description ("50 mm" -> 50.0)."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _FLOAT_PREFIX_RE.match(str(value))
    return float(match.group()) if match else None


def parse_int(value: Any) -> int | None:
    """Parse the leading integer of a description ("100, 100" -> 100)."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _INT_PREFIX_RE.match(str(value))
    return int(match.group()) if match else None


def file_attributes(data: bytes, file_name: str, mime_type: str) -> dict[str, Any]:
    """Fields derived from the upload itself, without decoding anything."""
    extension = file_name.rsplit(".", 1)[1].lower() if "." in file_name else ""
    return {
        "file_name": file_name,
        "file_size": format_file_size(len(data)),
        "file_size_bytes": len(data),
        "file_type": mime_type,
        "file_extension": extension,
    }


def read_dimensions(data: bytes) -> dict[str, Any]:
    """Decode the full image and read its pixel dimensions.

    Raises:
        PIL.UnidentifiedImageError, OSError: If the bytes are not an image
    """
    with Image.open(io.BytesIO(data)) as img:
        img.load()
        width, height = img.size

    dimensions: dict[str, Any] = {"image_width": width, "image_height": height}
    if height:
        dimensions["aspect_ratio"] = f"{width / height:.2f}"
    return dimensions


def _description(tags: dict[str, ExifTag], name: str) -> Any:
    tag = tags.get(name)
    return tag.description if tag is not None else None


def _gps_fields(tags: dict[str, ExifTag]) -> dict[str, Any]:
    latitude = _description(tags, "GPSLatitude")
    latitude_ref = _description(tags, "GPSLatitudeRef")
    longitude = _description(tags, "GPSLongitude")
    longitude_ref = _description(tags, "GPSLongitudeRef")

    if not (latitude and latitude_ref and longitude and longitude_ref):
        return {}

    lat = parse_float(latitude)
    lon = parse_float(longitude)
    if lat is None or lon is None:
        logger.warning("Ignoring GPS data with non-numeric coordinates")
        return {}

    fields: dict[str, Any] = {
        "gps_latitude": lat if latitude_ref == "N" else -lat,
        "gps_longitude": lon if longitude_ref == "E" else -lon,
    }

    altitude = _description(tags, "GPSAltitude")
    if altitude is not None:
        alt = parse_float(altitude)
        if alt is not None:
            fields["gps_altitude"] = alt
    return fields


def normalize_tags(
    tags: dict[str, ExifTag], has_dimensions: bool = False
) -> tuple[dict[str, Any], dict[str, ExtraValue]]:
    """Reshape decoded tags into well-known fields plus extra tags.

    Args:
        tags: Decoder output
        has_dimensions: Whether image decoding already supplied width/height

    Returns:
        Tuple of (well-known fields keyed by record field name, extra tags)
    """
    fields: dict[str, Any] = {}
    captured = set(CAPTURED_TAGS)

    if "Make" in tags:
        fields["make"] = safe_value(_description(tags, "Make"))
    if "Model" in tags:
        fields["model"] = safe_value(_description(tags, "Model"))

    for name in TIMESTAMP_TAGS:
        if name in tags:
            raw = safe_value(_description(tags, name))
            if raw is not None:
                raw = str(raw)
                fields["date_time"] = format_exif_date(raw)
                fields["raw_date_time"] = raw
                captured.add(name)
                break

    if "ExposureTime" in tags:
        exposure = safe_value(_description(tags, "ExposureTime"))
        fields["exposure_time"] = str(exposure) if exposure is not None else None

    if "FNumber" in tags:
        f_number = parse_float(_description(tags, "FNumber"))
        if f_number is not None:
            fields["f_number"] = f_number

    if "ISOSpeedRatings" in tags:
        iso = parse_int(_description(tags, "ISOSpeedRatings"))
        if iso is not None:
            fields["iso"] = iso

    if "FocalLength" in tags:
        focal = safe_value(_description(tags, "FocalLength"))
        fields["focal_length"] = str(focal) if focal is not None else None

    fields.update(_gps_fields(tags))

    if not has_dimensions:
        for name, field in (("ImageWidth", "image_width"), ("ImageHeight", "image_height")):
            if name in tags:
                size = parse_int(_description(tags, name))
                if size is not None:
                    fields[field] = size

    extra: dict[str, ExtraValue] = {}
    for name, tag in tags.items():
        if name in captured or tag.description is None:
            continue
        extra[name] = safe_value(tag.description)

    # Nothing nested may survive into the record
    for name, value in extra.items():
        if value is not None and not isinstance(value, (str, int, float)):
            extra[name] = json.dumps(value, default=str)

    return fields, extra


async def _resolve_location(fields: dict[str, Any], geocoder) -> None:
    if "gps_latitude" not in fields or "gps_longitude" not in fields:
        return
    if geocoder is None and not REVERSE_GEOCODE:
        return

    name = await asyncio.to_thread(
        reverse_geocode, fields["gps_latitude"], fields["gps_longitude"], geocoder
    )
    if name:
        fields["location_name"] = name


async def extract_metadata(
    data: bytes,
    file_name: str,
    mime_type: str,
    decoder: TagDecoder | None = None,
    geocoder=None,
) -> MetadataRecord:
    """Build the metadata record for one uploaded image.

    Never raises: decode failures are logged and the record degrades to the
    fields that could be read, at minimum the file attributes.

    Args:
        data: Raw image file bytes
        file_name: Original file name
        mime_type: MIME type reported for the upload
        decoder: Tag decoder, defaults to the Pillow decoder
        geocoder: Optional geopy geocoder used to resolve a place name

    Returns:
        MetadataRecord
    """
    file_info = file_attributes(data, file_name, mime_type)
    decoder = decoder or PillowTagDecoder()

    try:
        dims_result, tags_result = await asyncio.gather(
            asyncio.to_thread(read_dimensions, data),
            asyncio.to_thread(decoder.decode, data),
            return_exceptions=True,
        )

        dimensions: dict[str, Any] = {}
        if isinstance(dims_result, Exception):
            logger.warning(f"Could not load image for dimensions: {dims_result}")
        else:
            dimensions = dims_result

        tag_fields: dict[str, Any] = {}
        extra: dict[str, ExtraValue] = {}
        if isinstance(tags_result, Exception):
            logger.warning(f"Could not decode EXIF data for {file_name}: {tags_result}")
        else:
            tag_fields, extra = normalize_tags(tags_result, has_dimensions=bool(dimensions))

        # File attributes and decoded dimensions take precedence over tags
        fields = {**tag_fields, **dimensions, **file_info}
        await _resolve_location(fields, geocoder)

        record = MetadataRecord(**fields, extra=extra)
        logger.debug(f"Extracted {len(record.as_flat_dict())} metadata fields for {file_name}")
        return record

    except Exception as e:
        logger.error(f"Error extracting metadata for {file_name}: {e}", exc_info=True)
        return MetadataRecord(**file_info)
