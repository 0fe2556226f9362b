"""Tests for the analysis request builder and reply parser."""

import base64
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from imagelens.analysis import analyze_image, check_size, parse_reply
from imagelens.errors import AnalysisError, AnalysisUnavailableError, FileTooLargeError
from imagelens.schemas.analysis import DegradedReply, ParsedReply
from imagelens.schemas.metadata import MetadataRecord

LIMIT = 20 * 1024 * 1024

REPLY_JSON = (
    '{"description": "A quiet harbor at dusk.", '
    '"tags": ["harbor", "dusk"], '
    '"hashtags": ["#harbor", "#goldenhour"], '
    '"enhancementSuggestions": ['
    '{"title": "Straighten horizon", "description": "Rotate slightly.", "priority": "high"}'
    "]}"
)


@pytest.fixture
def mock_adapter():
    """Create a mock vision adapter."""
    adapter = MagicMock()
    adapter.infer = AsyncMock(return_value=REPLY_JSON)
    return adapter


def test_parse_fenced_json_block():
    """Test a JSON reply wrapped in a json-tagged fence."""
    text = (
        "```json\n"
        '{"description":"d","tags":["t"],"hashtags":["#h"],"enhancementSuggestions":[]}\n'
        "```"
    )

    reply = parse_reply(text)

    assert isinstance(reply, ParsedReply)
    assert reply.result.description == "d"
    assert reply.result.tags == ["t"]
    assert reply.result.hashtags == ["#h"]
    assert reply.result.enhancement_suggestions == []


def test_parse_untagged_fence_with_surrounding_text():
    """Test a fence without a language tag inside prose."""
    text = f"Here is the analysis:\n```\n{REPLY_JSON}\n```\nHope this helps!"

    reply = parse_reply(text)

    assert isinstance(reply, ParsedReply)
    assert reply.result.tags == ["harbor", "dusk"]
    assert reply.result.enhancement_suggestions[0].title == "Straighten horizon"
    assert reply.result.enhancement_suggestions[0].priority == "high"


def test_parse_prefers_json_fence_over_earlier_fence():
    """Test a json-tagged fence wins over an untagged one before it."""
    text = (
        "Here is a sketch:\n```\nnot json at all\n```\n"
        'and the result:\n```json\n{"description": "d", "tags": ["t"]}\n```'
    )

    reply = parse_reply(text)

    assert isinstance(reply, ParsedReply)
    assert reply.result.description == "d"
    assert reply.result.tags == ["t"]


def test_parse_bare_json():
    """Test a reply that is plain JSON without a fence."""
    reply = parse_reply(REPLY_JSON)

    assert isinstance(reply, ParsedReply)
    assert reply.result.description == "A quiet harbor at dusk."


def test_parse_partial_json():
    """Test missing fields default to empty values."""
    reply = parse_reply('{"description":"d"}')

    assert isinstance(reply, ParsedReply)
    assert reply.result.description == "d"
    assert reply.result.tags == []
    assert reply.result.hashtags == []
    assert reply.result.enhancement_suggestions == []


def test_parse_malformed_fields_dropped():
    """Test wrongly typed fields and suggestions are dropped, not raised."""
    reply = parse_reply(
        '{"description": 42, "tags": "sunset", "hashtags": ["#ok", 3], '
        '"enhancementSuggestions": [{"description": "no title"}, "text", '
        '{"title": "Crop", "priority": "URGENT"}]}'
    )

    assert isinstance(reply, ParsedReply)
    assert reply.result.description == ""
    assert reply.result.tags == []
    assert reply.result.hashtags == ["#ok"]
    assert len(reply.result.enhancement_suggestions) == 1
    assert reply.result.enhancement_suggestions[0].priority == "medium"


def test_parse_non_json_degrades():
    """Test free text degrades to a 200 character preview."""
    text = "Hello, here is my thought... " * 20

    reply = parse_reply(text)

    assert isinstance(reply, DegradedReply)
    assert reply.text == text
    assert reply.result.description == text[:200] + "..."
    assert reply.result.tags == []
    assert reply.result.hashtags == []
    assert reply.result.enhancement_suggestions == []


def test_parse_json_array_degrades():
    """Test JSON that is not an object is treated as unstructured."""
    reply = parse_reply('["a", "b"]')

    assert isinstance(reply, DegradedReply)
    assert reply.result.description == '["a", "b"]...'


def test_parse_deeply_nested_json_degrades():
    """Test JSON nested past the decoder's recursion limit degrades."""
    text = "[" * 200000 + "]" * 200000

    reply = parse_reply(text)

    assert isinstance(reply, DegradedReply)
    assert reply.result.description == text[:200] + "..."


def test_check_size_boundary():
    """Test exactly 20MB passes and one byte more fails."""
    check_size(LIMIT)

    with pytest.raises(FileTooLargeError) as exc_info:
        check_size(LIMIT + 1)

    assert exc_info.value.size_bytes == LIMIT + 1
    assert exc_info.value.size_mb == 20.0
    assert "(20.00 MB)" in str(exc_info.value)


@pytest.mark.asyncio
async def test_analyze_image(mock_adapter):
    """Test a successful analysis sends prompt and base64 image."""
    data = b"\xff\xd8fake-jpeg"
    record = MetadataRecord(make="Canon", model="EOS R5")

    result = await analyze_image(data, "image/jpeg", "boats", record, adapter=mock_adapter)

    assert result.description == "A quiet harbor at dusk."
    assert result.hashtags == ["#harbor", "#goldenhour"]

    mock_adapter.infer.assert_awaited_once()
    prompt, image_base64, mime_type = mock_adapter.infer.call_args.args
    assert 'User provided context: "boats"' in prompt
    assert "Camera: Canon EOS R5" in prompt
    assert base64.b64decode(image_base64) == data
    assert mime_type == "image/jpeg"


@pytest.mark.asyncio
async def test_analyze_image_degraded_reply(mock_adapter):
    """Test a non-JSON reply is not treated as a failure."""
    mock_adapter.infer.return_value = "I cannot format this as JSON, sorry."

    result = await analyze_image(b"img", "image/png", adapter=mock_adapter)

    assert result.description == "I cannot format this as JSON, sorry...."
    assert result.tags == []


@pytest.mark.asyncio
async def test_analyze_image_deeply_nested_reply_degrades(mock_adapter):
    """Test a pathologically nested reply degrades instead of raising."""
    mock_adapter.infer.return_value = '{"a": ' + "[" * 200000 + "]" * 200000 + "}"

    result = await analyze_image(b"img", "image/jpeg", adapter=mock_adapter)

    assert result.description == mock_adapter.infer.return_value[:200] + "..."
    assert result.tags == []


@pytest.mark.asyncio
async def test_analyze_image_too_large_makes_no_call(mock_adapter):
    """Test oversize payloads fail before any outbound request."""
    with pytest.raises(FileTooLargeError):
        await analyze_image(b"\x00" * (LIMIT + 1), "image/jpeg", adapter=mock_adapter)

    mock_adapter.infer.assert_not_called()


@pytest.mark.asyncio
async def test_analyze_image_at_limit(mock_adapter):
    """Test a payload of exactly 20MB is analyzed."""
    result = await analyze_image(b"\x00" * LIMIT, "image/jpeg", adapter=mock_adapter)

    assert result.tags == ["harbor", "dusk"]


@pytest.mark.asyncio
async def test_analyze_image_upstream_error(mock_adapter):
    """Test transport errors surface as AnalysisUnavailableError."""
    mock_adapter.infer.side_effect = ConnectionError("network down")

    with pytest.raises(AnalysisUnavailableError) as exc_info:
        await analyze_image(b"img", "image/jpeg", adapter=mock_adapter)

    assert isinstance(exc_info.value, AnalysisError)
    assert isinstance(exc_info.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_analyze_image_missing_credentials():
    """Test a missing API key is reported as a generic failure."""
    with patch("imagelens.analysis.get_adapter", side_effect=ValueError("GEMINI_API_KEY is required")):
        with pytest.raises(AnalysisUnavailableError):
            await analyze_image(b"img", "image/jpeg")
