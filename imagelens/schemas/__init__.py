"""Schemas shared by the metadata and analysis components."""

from imagelens.schemas.analysis import (
    AnalysisResult,
    DegradedReply,
    EnhancementSuggestion,
    ParsedReply,
)
from imagelens.schemas.metadata import ExifTag, ExtraValue, MetadataRecord

__all__ = [
    "AnalysisResult",
    "DegradedReply",
    "EnhancementSuggestion",
    "ExifTag",
    "ExtraValue",
    "MetadataRecord",
    "ParsedReply",
]
