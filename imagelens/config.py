import os

ANALYZER_PROVIDER = os.environ.get("ANALYZER_PROVIDER", "gemini")
DEFAULT_MODELS = {
    "gemini": "gemini-2.0-flash-lite",
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-haiku-latest",
    "ollama": "llava",
}
ANALYZER_MODEL = os.environ.get(
    "ANALYZER_MODEL", DEFAULT_MODELS.get(ANALYZER_PROVIDER, DEFAULT_MODELS["gemini"])
)

GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")
ANTHROPIC_API_KEY = os.environ.get("ANTHROPIC_API_KEY", "")
OLLAMA_URL = os.environ.get("OLLAMA_URL", "http://localhost:11434")

# Reverse geocoding hits a public Nominatim instance, so it is opt-in
REVERSE_GEOCODE = os.environ.get("REVERSE_GEOCODE", "false").lower() in ("true", "1", "yes")
GEOCODER_USER_AGENT = os.environ.get("GEOCODER_USER_AGENT", "imagelens")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Hosted models reject inline payloads above 20MB
MAX_IMAGE_BYTES = 20 * 1024 * 1024
PREVIEW_CHARS = 200
MAX_TOKENS = 4096

RESIZE_MAX_MB = 19
RESIZE_MAX_DIMENSION = 3000
