"""Ollama adapter for image analysis."""

import logging

import httpx

from imagelens.adapters.base import VisionAdapter
from imagelens.config import ANALYZER_MODEL, OLLAMA_URL

logger = logging.getLogger(__name__)


class OllamaAdapter(VisionAdapter):
    """Ollama-based vision adapter."""

    def __init__(self):
        self.base_url = OLLAMA_URL
        self.model = ANALYZER_MODEL
        self.timeout = 120.0

    async def infer(self, prompt: str, image_base64: str, mime_type: str) -> str:
        """Describe an image using an Ollama vision model."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}/api/generate",
                json={
                    "model": self.model,
                    "prompt": prompt,
                    "images": [image_base64],
                    "stream": False,
                },
            )
            response.raise_for_status()
            result = response.json()

        return result.get("response", "")

    async def is_available(self) -> bool:
        """Check if Ollama is reachable."""
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                return response.status_code == 200
        except Exception as e:
            logger.warning(f"Ollama availability check failed: {e}")
            return False
