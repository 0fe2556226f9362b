"""Adapter factory and exports."""
from imagelens.adapters.base import VisionAdapter
from imagelens.config import ANALYZER_PROVIDER


def get_adapter() -> VisionAdapter:
    """Get the configured vision adapter.

    Returns:
        VisionAdapter instance based on ANALYZER_PROVIDER config

    Raises:
        ValueError: If the provider's API key is not configured
    """
    if ANALYZER_PROVIDER == "anthropic":
        from imagelens.adapters.anthropic import AnthropicAdapter
        return AnthropicAdapter()
    elif ANALYZER_PROVIDER == "openai":
        from imagelens.adapters.openai import OpenAIAdapter
        return OpenAIAdapter()
    elif ANALYZER_PROVIDER == "ollama":
        from imagelens.adapters.ollama import OllamaAdapter
        return OllamaAdapter()
    else:
        # Default to Gemini
        from imagelens.adapters.gemini import GeminiAdapter
        return GeminiAdapter()


__all__ = ["VisionAdapter", "get_adapter"]
