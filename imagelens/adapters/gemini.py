"""Google Gemini adapter for image analysis."""

import base64
import logging

from imagelens.adapters.base import VisionAdapter
from imagelens.config import ANALYZER_MODEL, GEMINI_API_KEY

logger = logging.getLogger(__name__)


class GeminiAdapter(VisionAdapter):
    """Gemini-based vision adapter."""

    def __init__(self):
        if not GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")

        from google import genai

        self.client = genai.Client(api_key=GEMINI_API_KEY)
        self.model = ANALYZER_MODEL

    async def infer(self, prompt: str, image_base64: str, mime_type: str) -> str:
        """Describe an image using Gemini."""
        from google.genai import types

        image_part = types.Part.from_bytes(
            data=base64.b64decode(image_base64), mime_type=mime_type
        )
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=[prompt, image_part],
        )
        return response.text or ""

    async def is_available(self) -> bool:
        """Check if the Gemini API is available."""
        try:
            await self.client.aio.models.generate_content(model=self.model, contents="test")
            return True
        except Exception as e:
            logger.warning(f"Gemini availability check failed: {e}")
            return False
