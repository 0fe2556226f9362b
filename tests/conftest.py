"""Shared fixtures: in-memory test images."""

import io

import pytest
from PIL import Image
from PIL.TiffImagePlugin import IFDRational

EXIF_IFD = 0x8769
GPS_IFD = 0x8825


def make_jpeg(width: int = 64, height: int = 48, exif: Image.Exif | None = None) -> bytes:
    """Encode a solid-color JPEG, optionally carrying EXIF."""
    buffer = io.BytesIO()
    img = Image.new("RGB", (width, height), (200, 120, 40))
    if exif is not None:
        img.save(buffer, format="JPEG", exif=exif)
    else:
        img.save(buffer, format="JPEG")
    return buffer.getvalue()


def camera_exif() -> Image.Exif:
    """EXIF for a Canon shot taken in the southern/eastern hemispheres."""
    exif = Image.Exif()
    exif[0x010F] = "Canon"  # Make
    exif[0x0110] = "EOS R5"  # Model
    exif[0x0132] = "2025:02:25 14:30:00"  # DateTime
    exif[0x0131] = "Test Software 1.0"  # Software
    exif[EXIF_IFD] = {
        0x829A: IFDRational(1, 125),  # ExposureTime
        0x829D: IFDRational(28, 10),  # FNumber
        0x8827: 400,  # ISOSpeedRatings
        0x920A: IFDRational(50, 1),  # FocalLength
    }
    exif[GPS_IFD] = {
        1: "S",  # GPSLatitudeRef
        2: (IFDRational(10, 1), IFDRational(30, 1), IFDRational(0, 1)),
        3: "E",  # GPSLongitudeRef
        4: (IFDRational(20, 1), IFDRational(15, 1), IFDRational(0, 1)),
        6: IFDRational(1234, 10),  # GPSAltitude
    }
    return exif


@pytest.fixture
def plain_jpeg() -> bytes:
    return make_jpeg()


@pytest.fixture
def camera_jpeg() -> bytes:
    return make_jpeg(exif=camera_exif())


@pytest.fixture
def jpeg_factory():
    return make_jpeg
