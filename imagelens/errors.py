"""Failures raised by the analysis path."""

from imagelens.config import MAX_IMAGE_BYTES


class AnalysisError(Exception):
    """Base class for analysis failures."""


class FileTooLargeError(AnalysisError):
    """The image exceeds the inline payload ceiling of the hosted model."""

    def __init__(self, size_bytes: int):
        self.size_bytes = size_bytes
        self.size_mb = round(size_bytes / (1024 * 1024), 2)
        limit_mb = MAX_IMAGE_BYTES // (1024 * 1024)
        super().__init__(
            f"Image file size ({self.size_mb:.2f} MB) exceeds the {limit_mb}MB limit for AI analysis."
        )


class AnalysisUnavailableError(AnalysisError):
    """The hosted model could not produce a reply."""

    def __init__(self, message: str = "Image analysis is currently unavailable."):
        super().__init__(message)
