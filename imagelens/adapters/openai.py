"""OpenAI adapter for image analysis."""

import logging

from imagelens.adapters.base import VisionAdapter
from imagelens.config import ANALYZER_MODEL, MAX_TOKENS, OPENAI_API_KEY

logger = logging.getLogger(__name__)


class OpenAIAdapter(VisionAdapter):
    """OpenAI GPT-based vision adapter."""

    def __init__(self):
        if not OPENAI_API_KEY:
            raise ValueError("OPENAI_API_KEY environment variable is required")

        from openai import AsyncOpenAI
        self.client = AsyncOpenAI(api_key=OPENAI_API_KEY)
        self.model = ANALYZER_MODEL
        self.max_tokens = MAX_TOKENS

    async def infer(self, prompt: str, image_base64: str, mime_type: str) -> str:
        """Describe an image using GPT vision."""
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{
                "role": "user",
                "content": [
                    {
                        "type": "text",
                        "text": prompt
                    },
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": f"data:{mime_type};base64,{image_base64}"
                        }
                    }
                ]
            }],
            max_tokens=self.max_tokens,
        )
        return response.choices[0].message.content or ""

    async def is_available(self) -> bool:
        """Check if OpenAI API is available."""
        try:
            # Try a minimal API call
            await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": "test"}],
                max_tokens=5
            )
            return True
        except Exception as e:
            logger.warning(f"OpenAI availability check failed: {e}")
            return False
