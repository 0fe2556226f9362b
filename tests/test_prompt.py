"""Tests for prompt construction."""
from imagelens.prompt import NO_METADATA, build_prompt, format_metadata_for_prompt
from imagelens.schemas.metadata import MetadataRecord


def test_format_metadata_all_sections():
    """Test each populated section renders with its label lines."""
    record = MetadataRecord(
        make="Canon",
        model="EOS R5",
        date_time="February 25, 2025, 02:30 PM",
        exposure_time="1/125",
        f_number=2.8,
        iso=400,
        focal_length="50 mm",
        image_width=6000,
        image_height=4000,
        aspect_ratio="1.50",
        file_type="image/jpeg",
        gps_latitude=-10.5,
        gps_longitude=20.25,
        location_name="Sydney, Australia",
    )

    text = format_metadata_for_prompt(record)

    assert text == (
        "Camera Settings:\n"
        "Camera: Canon EOS R5\n"
        "Date Taken: February 25, 2025, 02:30 PM\n"
        "Exposure: 1/125s\n"
        "Aperture: f/2.8\n"
        "ISO: 400\n"
        "Focal Length: 50 mm\n"
        "\n"
        "Image Information:\n"
        "Dimensions: 6000 × 4000 px\n"
        "Aspect Ratio: 1.50\n"
        "File Type: image/jpeg\n"
        "\n"
        "Location:\n"
        "Coordinates: -10.5, 20.25\n"
        "Location Name: Sydney, Australia"
    )


def test_format_metadata_omits_empty_sections():
    """Test sections with no present fields are left out."""
    text = format_metadata_for_prompt(MetadataRecord(file_type="image/png"))

    assert text == "Image Information:\nFile Type: image/png"
    assert "Camera Settings" not in text
    assert "Location" not in text


def test_format_metadata_camera_needs_make_and_model():
    """Test the camera line requires both make and model."""
    text = format_metadata_for_prompt(MetadataRecord(make="Canon", iso=100))

    assert "Camera:" not in text
    assert "ISO: 100" in text


def test_format_metadata_zero_coordinates_are_present():
    """Test a 0.0 coordinate still counts as present."""
    text = format_metadata_for_prompt(MetadataRecord(gps_latitude=0.0, gps_longitude=12.5))

    assert "Coordinates: 0.0, 12.5" in text


def test_format_metadata_location_name_needs_coordinates():
    text = format_metadata_for_prompt(MetadataRecord(location_name="Paris"))

    assert text == ""


def test_format_metadata_empty():
    assert format_metadata_for_prompt(MetadataRecord()) == ""
    assert format_metadata_for_prompt(None) == ""


def test_build_prompt_with_context_and_metadata():
    """Test user context and metadata are embedded in the prompt."""
    record = MetadataRecord(iso=3200, f_number=1.8)

    prompt = build_prompt("Sunset at the beach", record)

    assert 'User provided context: "Sunset at the beach"' in prompt
    assert "Use this context to inform your analysis." in prompt
    assert "EXIF Data:\nCamera Settings:\nAperture: f/1.8\nISO: 3200" in prompt
    assert "suggest noise reduction" in prompt
    assert NO_METADATA not in prompt


def test_build_prompt_without_metadata():
    """Test the fallback sentence replaces an empty metadata block."""
    prompt = build_prompt(None, None)

    assert NO_METADATA in prompt
    assert "User provided context" not in prompt
    assert "EXIF Data" not in prompt
    assert "suggest noise reduction" not in prompt


def test_build_prompt_output_contract():
    """Test the prompt requests the documented JSON shape."""
    prompt = build_prompt()

    assert "3-4 sentences" in prompt
    assert "5-7 relevant tags" in prompt
    assert "5-7 hashtags" in prompt
    assert "3-5 enhancement suggestions" in prompt
    assert "single JSON object" in prompt
    assert '"enhancementSuggestions"' in prompt
    assert '"hashtags": ["#hashtag1"' in prompt


def test_build_prompt_blank_context_ignored():
    assert "User provided context" not in build_prompt("   ", None)
