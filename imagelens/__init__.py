"""Image metadata extraction and AI-assisted image analysis."""

from imagelens.analysis import analyze_image, parse_reply
from imagelens.errors import AnalysisError, AnalysisUnavailableError, FileTooLargeError
from imagelens.metadata import extract_metadata
from imagelens.pipeline import UploadResult, process_upload

__all__ = [
    "AnalysisError",
    "AnalysisUnavailableError",
    "FileTooLargeError",
    "UploadResult",
    "analyze_image",
    "extract_metadata",
    "parse_reply",
    "process_upload",
]
