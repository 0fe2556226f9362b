"""Image analysis result schema."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

PRIORITIES = ("high", "medium", "low")


class EnhancementSuggestion(BaseModel):
    """A suggested edit for the analyzed image."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    priority: Literal["high", "medium", "low"] = "medium"

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, value):
        # Models sometimes echo the template ("high/medium/low") or capitalize
        if isinstance(value, str) and value.strip().lower() in PRIORITIES:
            return value.strip().lower()
        return "medium"


class AnalysisResult(BaseModel):
    """Structured output derived from the model reply."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    description: str = ""
    tags: list[str] = Field(default_factory=list)
    hashtags: list[str] = Field(default_factory=list)
    enhancement_suggestions: list[EnhancementSuggestion] = Field(
        default_factory=list, alias="enhancementSuggestions"
    )


class ParsedReply(BaseModel):
    """The reply contained a JSON object."""

    kind: Literal["parsed"] = "parsed"
    result: AnalysisResult


class DegradedReply(BaseModel):
    """The reply was not JSON; only a preview of the text is kept."""

    kind: Literal["degraded"] = "degraded"
    text: str
    result: AnalysisResult


# JSON shape the model is asked to reply with
RESPONSE_SHAPE = """{
  "description": "your detailed description here",
  "tags": ["tag1", "tag2", "tag3", "tag4", "tag5"],
  "hashtags": ["#hashtag1", "#hashtag2", "#hashtag3", "#hashtag4", "#hashtag5"],
  "enhancementSuggestions": [
    {
      "title": "Suggestion title",
      "description": "Detailed explanation of the suggestion",
      "priority": "high/medium/low"
    }
  ]
}"""

# Prompt template for image analysis
PROMPT = """You are a professional photographer and social media expert.
Analyze this image and provide:{context}{metadata}
1. A detailed, empathetic, and human-like description (3-4 sentences)
2. 5-7 relevant tags for social media
3. 5-7 hashtags for social media (including the # symbol)
4. 3-5 enhancement suggestions for the image, each with:
   - A short title (2-4 words)
   - A brief description explaining how to improve the image (1-2 sentences)
   - A priority level (high, medium, or low) based on how much the enhancement would improve the image

For enhancement suggestions, consider aspects like:
- Composition (rule of thirds, framing, leading lines)
- Lighting (exposure, shadows, highlights)
- Color balance and saturation
- Focus and sharpness
- Cropping opportunities
- Potential filters or effects
{technical_hint}
Format your entire response as a single JSON object with the following structure:
{shape}"""
