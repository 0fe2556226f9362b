"""Downscaling of images that are too large for analysis."""

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError
from pydantic import BaseModel

from imagelens.config import RESIZE_MAX_DIMENSION, RESIZE_MAX_MB

logger = logging.getLogger(__name__)

MIN_QUALITY = 40
MIN_DIMENSION = 256


class ResizeError(Exception):
    """The image could not be decoded or re-encoded."""


class ResizedImage(BaseModel):
    data: bytes
    file_name: str
    mime_type: str = "image/jpeg"


def fit_within(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Clamp the longest side to max_dimension, keeping the aspect ratio."""
    if width <= max_dimension and height <= max_dimension:
        return width, height
    ratio = width / height
    if width > height:
        return max_dimension, max(1, round(max_dimension / ratio))
    return max(1, round(max_dimension * ratio)), max_dimension


def _encode(img: Image.Image, size: tuple[int, int], quality: int) -> bytes:
    buffer = io.BytesIO()
    img.resize(size, Image.Resampling.LANCZOS).save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def downscale_image(
    data: bytes,
    file_name: str,
    max_size_mb: float = RESIZE_MAX_MB,
    max_dimension: int = RESIZE_MAX_DIMENSION,
    quality: int = 90,
) -> ResizedImage:
    """Re-encode an image as JPEG small enough for analysis.

    The longest side is first clamped to max_dimension. While the output is
    still above max_size_mb, JPEG quality drops in steps of 10 down to
    MIN_QUALITY, then the dimensions shrink by a quarter per step.

    Args:
        data: Raw image bytes
        file_name: Original file name, kept for the result
        max_size_mb: Target ceiling in MB
        max_dimension: Longest side in pixels
        quality: Initial JPEG quality

    Returns:
        ResizedImage

    Raises:
        ResizeError: If the bytes cannot be decoded as an image, or decode
            to more pixels than Pillow allows
    """
    max_bytes = int(max_size_mb * 1024 * 1024)

    try:
        with Image.open(io.BytesIO(data)) as source:
            img = ImageOps.exif_transpose(source).convert("RGB")
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise ResizeError(f"Error loading image: {e}") from e

    width, height = fit_within(img.width, img.height, max_dimension)
    encoded = _encode(img, (width, height), quality)

    while len(encoded) > max_bytes:
        if quality > MIN_QUALITY:
            quality = max(MIN_QUALITY, quality - 10)
        elif max(width, height) > MIN_DIMENSION:
            width, height = fit_within(width, height, max(MIN_DIMENSION, int(max(width, height) * 0.75)))
        else:
            logger.warning(f"Could not reduce {file_name} below {max_size_mb} MB")
            break
        encoded = _encode(img, (width, height), quality)

    logger.info(
        f"Resized {file_name} to {width}x{height} at quality {quality} "
        f"({len(data)} -> {len(encoded)} bytes)"
    )
    return ResizedImage(data=encoded, file_name=file_name)
