"""Base adapter interface for hosted vision models."""

from abc import ABC, abstractmethod


class VisionAdapter(ABC):
    """Abstract base class for vision-language model adapters."""

    @abstractmethod
    async def infer(self, prompt: str, image_base64: str, mime_type: str) -> str:
        """Send one prompt with one inline image and return the reply text.

        Args:
            prompt: Instruction text
            image_base64: Base64-encoded image data
            mime_type: MIME type of the image

        Returns:
            The model's free-form reply

        Raises:
            Exception: Any transport or upstream error, unchanged
        """
        pass

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if the provider is reachable.

        Returns:
            True if available, False otherwise
        """
        pass
