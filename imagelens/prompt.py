"""Prompt construction for image analysis."""

from imagelens.schemas.analysis import PROMPT, RESPONSE_SHAPE
from imagelens.schemas.metadata import MetadataRecord

CAMERA_SETTINGS = "Camera Settings"
IMAGE_INFORMATION = "Image Information"
LOCATION = "Location"

# (section, line template, fields that must all be present)
FIELD_TABLE: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    (CAMERA_SETTINGS, "Camera: {make} {model}", ("make", "model")),
    (CAMERA_SETTINGS, "Date Taken: {date_time}", ("date_time",)),
    (CAMERA_SETTINGS, "Exposure: {exposure_time}s", ("exposure_time",)),
    (CAMERA_SETTINGS, "Aperture: f/{f_number}", ("f_number",)),
    (CAMERA_SETTINGS, "ISO: {iso}", ("iso",)),
    (CAMERA_SETTINGS, "Focal Length: {focal_length}", ("focal_length",)),
    (IMAGE_INFORMATION, "Dimensions: {image_width} × {image_height} px", ("image_width", "image_height")),
    (IMAGE_INFORMATION, "Aspect Ratio: {aspect_ratio}", ("aspect_ratio",)),
    (IMAGE_INFORMATION, "File Type: {file_type}", ("file_type",)),
    (LOCATION, "Coordinates: {gps_latitude}, {gps_longitude}", ("gps_latitude", "gps_longitude")),
    (LOCATION, "Location Name: {location_name}", ("gps_latitude", "gps_longitude", "location_name")),
)

SECTION_ORDER = (CAMERA_SETTINGS, IMAGE_INFORMATION, LOCATION)

NO_METADATA = "No EXIF metadata is available for this image."

TECHNICAL_HINT = (
    "Use the EXIF data to provide technically accurate suggestions. For example, "
    "if the image has a high ISO, suggest noise reduction; if it has a shallow depth "
    "of field (low f-number), comment on the bokeh quality."
)


def _present(value) -> bool:
    return value is not None and value != ""


def format_metadata_for_prompt(record: MetadataRecord | None) -> str:
    """Render the record as labeled sections, skipping empty ones."""
    if record is None:
        return ""

    values = record.model_dump(exclude={"extra"})
    lines: dict[str, list[str]] = {section: [] for section in SECTION_ORDER}
    for section, template, required in FIELD_TABLE:
        if all(_present(values.get(field)) for field in required):
            lines[section].append(template.format(**values))

    sections = [
        f"{section}:\n" + "\n".join(lines[section])
        for section in SECTION_ORDER
        if lines[section]
    ]
    return "\n\n".join(sections)


def build_prompt(user_context: str | None = None, metadata: MetadataRecord | None = None) -> str:
    """Compose the analysis instruction sent alongside the image.

    Args:
        user_context: Optional free text supplied by the user
        metadata: Normalized metadata for the image

    Returns:
        Prompt text
    """
    context = ""
    if user_context and user_context.strip():
        context = (
            f'\nUser provided context: "{user_context}"\n'
            "Use this context to inform your analysis."
        )

    metadata_block = format_metadata_for_prompt(metadata)
    if metadata_block:
        metadata_section = (
            f"\nEXIF Data:\n{metadata_block}\n"
            "Use this technical information to inform your analysis."
        )
        technical_hint = f"\n{TECHNICAL_HINT}\n"
    else:
        metadata_section = f"\n{NO_METADATA}"
        technical_hint = ""

    return PROMPT.format(
        context=context,
        metadata=metadata_section,
        technical_hint=technical_hint,
        shape=RESPONSE_SHAPE,
    )
