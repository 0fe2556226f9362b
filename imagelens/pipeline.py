"""Upload pipeline: metadata extraction followed by AI analysis."""

import asyncio
import json
import logging
import time

from pydantic import BaseModel

from imagelens.adapters import VisionAdapter
from imagelens.analysis import analyze_image
from imagelens.errors import AnalysisError, FileTooLargeError
from imagelens.metadata import extract_metadata
from imagelens.resize import ResizeError, downscale_image
from imagelens.schemas.analysis import AnalysisResult
from imagelens.schemas.metadata import MetadataRecord

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to analyze image with AI. Please try again or try a different image."
RESIZE_FAILURE = "Failed to resize image. Please try a different image or resize it manually."


class UploadResult(BaseModel):
    """Everything known about one uploaded image."""

    metadata: MetadataRecord
    analysis: AnalysisResult | None = None
    error: str | None = None
    too_large: bool = False


async def process_upload(
    data: bytes,
    file_name: str,
    mime_type: str,
    user_context: str | None = None,
    adapter: VisionAdapter | None = None,
    geocoder=None,
) -> UploadResult:
    """Run metadata extraction and analysis for one image.

    The metadata record is kept even when analysis fails.

    Args:
        data: Raw image bytes
        file_name: Original file name
        mime_type: MIME type of the upload
        user_context: Optional free text for the model
        adapter: Vision adapter, defaults to the configured provider
        geocoder: Optional geopy geocoder for the place name

    Returns:
        UploadResult
    """
    start_time = time.time()

    metadata = await extract_metadata(data, file_name, mime_type, geocoder=geocoder)

    try:
        analysis = await analyze_image(data, mime_type, user_context, metadata, adapter=adapter)
    except FileTooLargeError as e:
        logger.warning(f"Skipping analysis for {file_name}: {e}")
        return UploadResult(metadata=metadata, error=str(e), too_large=True)
    except AnalysisError as e:
        logger.error(f"Analysis failed for {file_name}: {e}")
        return UploadResult(metadata=metadata, error=GENERIC_FAILURE)

    elapsed_ms = int((time.time() - start_time) * 1000)
    logger.info(
        json.dumps(
            {
                "event": "analysis_complete",
                "fileName": file_name,
                "sizeBytes": len(data),
                "tags": len(analysis.tags),
                "suggestions": len(analysis.enhancement_suggestions),
                "elapsed_ms": elapsed_ms,
            }
        )
    )
    return UploadResult(metadata=metadata, analysis=analysis)


async def process_upload_with_resize(
    data: bytes,
    file_name: str,
    mime_type: str,
    user_context: str | None = None,
    adapter: VisionAdapter | None = None,
    geocoder=None,
) -> UploadResult:
    """Like process_upload, but downscales and retries once when too large."""
    result = await process_upload(data, file_name, mime_type, user_context, adapter, geocoder)
    if not result.too_large:
        return result

    try:
        resized = await asyncio.to_thread(downscale_image, data, file_name)
    except ResizeError as e:
        logger.error(f"Could not resize {file_name}: {e}")
        return result.model_copy(update={"error": RESIZE_FAILURE})

    return await process_upload(
        resized.data, resized.file_name, resized.mime_type, user_context, adapter, geocoder
    )
