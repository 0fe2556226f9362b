"""Image analysis: prompt the hosted model and parse its reply."""

import base64
import json
import logging
import re
from typing import Any

from imagelens.adapters import VisionAdapter, get_adapter
from imagelens.config import MAX_IMAGE_BYTES, PREVIEW_CHARS
from imagelens.errors import AnalysisUnavailableError, FileTooLargeError
from imagelens.prompt import build_prompt
from imagelens.schemas.analysis import (
    AnalysisResult,
    DegradedReply,
    EnhancementSuggestion,
    ParsedReply,
)
from imagelens.schemas.metadata import MetadataRecord

logger = logging.getLogger(__name__)

# A json-tagged fence wins over an untagged one anywhere in the reply
JSON_FENCE_RE = re.compile(r"```[ \t]*json[ \t]*\r?\n(.*?)\r?\n?```", re.DOTALL | re.IGNORECASE)
FENCED_BLOCK_RE = re.compile(r"```[ \t]*[A-Za-z0-9_-]*[ \t]*\r?\n(.*?)\r?\n?```", re.DOTALL)


def _extract_json_text(text: str) -> str:
    match = JSON_FENCE_RE.search(text) or FENCED_BLOCK_RE.search(text)
    if match:
        return match.group(1)
    return text


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _suggestions(value: Any) -> list[EnhancementSuggestion]:
    if not isinstance(value, list):
        return []

    suggestions = []
    for item in value:
        if not isinstance(item, dict) or not isinstance(item.get("title"), str):
            logger.debug(f"Dropping malformed enhancement suggestion: {item!r}")
            continue
        description = item.get("description")
        suggestions.append(
            EnhancementSuggestion(
                title=item["title"],
                description=description if isinstance(description, str) else "",
                priority=item.get("priority"),
            )
        )
    return suggestions


def degraded_result(text: str) -> AnalysisResult:
    """Fallback result holding a preview of a reply that was not JSON."""
    return AnalysisResult(description=f"{text[:PREVIEW_CHARS]}...")


def parse_reply(text: str) -> ParsedReply | DegradedReply:
    """Extract the analysis from the model's free-text reply.

    A json-tagged fence is tried first, then any fence, then the whole
    reply. Missing or malformed fields default to empty values; a reply with
    no JSON object at all degrades to a truncated description.

    Args:
        text: Raw reply from the model

    Returns:
        ParsedReply, or DegradedReply when no JSON object could be read
    """
    try:
        parsed = json.loads(_extract_json_text(text))
    except (ValueError, TypeError, RecursionError) as e:
        logger.warning(f"Error parsing model response: {e}")
        return DegradedReply(text=text, result=degraded_result(text))

    if not isinstance(parsed, dict):
        logger.warning(f"Model response is JSON but not an object: {type(parsed).__name__}")
        return DegradedReply(text=text, result=degraded_result(text))

    description = parsed.get("description")
    result = AnalysisResult(
        description=description if isinstance(description, str) else "",
        tags=_string_list(parsed.get("tags")),
        hashtags=_string_list(parsed.get("hashtags")),
        enhancement_suggestions=_suggestions(parsed.get("enhancementSuggestions")),
    )
    return ParsedReply(result=result)


def check_size(size_bytes: int) -> None:
    """Raise FileTooLargeError when the payload exceeds MAX_IMAGE_BYTES."""
    if size_bytes > MAX_IMAGE_BYTES:
        raise FileTooLargeError(size_bytes)


async def analyze_image(
    data: bytes,
    mime_type: str,
    user_context: str | None = None,
    metadata: MetadataRecord | None = None,
    adapter: VisionAdapter | None = None,
) -> AnalysisResult:
    """Analyze an image with the hosted vision model.

    Args:
        data: Raw image bytes
        mime_type: MIME type of the image
        user_context: Optional free text to weight the analysis
        metadata: Normalized metadata to include in the prompt
        adapter: Vision adapter, defaults to the configured provider

    Returns:
        AnalysisResult (possibly degraded when the reply is not JSON)

    Raises:
        FileTooLargeError: If the image is above the payload ceiling
        AnalysisUnavailableError: If the model call fails for any other reason
    """
    check_size(len(data))

    prompt = build_prompt(user_context, metadata)
    image_base64 = base64.b64encode(data).decode("ascii")

    try:
        adapter = adapter or get_adapter()
        text = await adapter.infer(prompt, image_base64, mime_type)
    except Exception as e:
        logger.error(f"Error analyzing image: {e}", exc_info=True)
        raise AnalysisUnavailableError() from e

    reply = parse_reply(text)
    if isinstance(reply, DegradedReply):
        logger.info("Model reply was not JSON; returning text preview")
    else:
        logger.debug(
            f"Parsed analysis: {len(reply.result.tags)} tags, "
            f"{len(reply.result.hashtags)} hashtags, "
            f"{len(reply.result.enhancement_suggestions)} suggestions"
        )
    return reply.result
