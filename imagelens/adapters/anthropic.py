"""Anthropic adapter for image analysis."""

import logging

from imagelens.adapters.base import VisionAdapter
from imagelens.config import ANALYZER_MODEL, ANTHROPIC_API_KEY, MAX_TOKENS

logger = logging.getLogger(__name__)


class AnthropicAdapter(VisionAdapter):
    """Anthropic Claude-based vision adapter."""

    def __init__(self):
        if not ANTHROPIC_API_KEY:
            raise ValueError("ANTHROPIC_API_KEY environment variable is required")

        from anthropic import AsyncAnthropic

        self.client = AsyncAnthropic(api_key=ANTHROPIC_API_KEY)
        self.model = ANALYZER_MODEL
        self.max_tokens = MAX_TOKENS

    async def infer(self, prompt: str, image_base64: str, mime_type: str) -> str:
        """Describe an image using Claude's vision capabilities."""
        message = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": mime_type,
                                "data": image_base64,
                            },
                        },
                        {"type": "text", "text": prompt},
                    ],
                }
            ],
        )

        return "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )

    async def is_available(self) -> bool:
        """Check if Anthropic API is available."""
        try:
            # Try a minimal API call
            await self.client.messages.create(
                model=self.model,
                max_tokens=10,
                messages=[{"role": "user", "content": "test"}],
            )
            return True
        except Exception as e:
            logger.warning(f"Anthropic availability check failed: {e}")
            return False
