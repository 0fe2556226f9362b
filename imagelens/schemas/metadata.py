"""Normalized image metadata schema."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Values allowed in the flat record; nested structures are serialized to str
ExtraValue = str | int | float | None


class ExifTag(BaseModel):
    """A single tag as reported by the tag decoder."""

    description: str | None = None


class MetadataRecord(BaseModel):
    """Flat, human-readable metadata for one uploaded image."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    # File information
    file_name: str | None = None
    file_size: str | None = None
    file_size_bytes: int | None = None
    file_type: str | None = None
    file_extension: str | None = None

    # Image dimensions
    image_width: int | None = None
    image_height: int | None = None
    aspect_ratio: str | None = None

    # Camera information
    make: str | None = None
    model: str | None = None
    date_time: str | None = None
    raw_date_time: str | None = None  # original unformatted EXIF timestamp
    exposure_time: str | None = None
    f_number: float | None = None
    iso: int | None = None
    focal_length: str | None = None

    # Location information
    gps_latitude: float | None = None
    gps_longitude: float | None = None
    gps_altitude: float | None = None
    location_name: str | None = None

    # Every other decoder tag, under its native key
    extra: dict[str, ExtraValue] = Field(default_factory=dict)

    def as_flat_dict(self) -> dict[str, ExtraValue]:
        """Return well-known fields (camelCase) merged with the extra tags.

        Well-known fields win over extra tags with the same key.
        """
        flat: dict[str, ExtraValue] = dict(self.extra)
        flat.update(self.model_dump(by_alias=True, exclude_none=True, exclude={"extra"}))
        return flat
