from __future__ import annotations

from app.ai.providers.openai_provider import OpenAIProvider

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class GroqProvider(OpenAIProvider):
    """Groq exposes an OpenAI-compatible chat completions API."""

    name = "groq"
    default_model = "llama-3.3-70b-versatile"
    api_key_env = "GROQ_API_KEY"

    def __init__(self, model=None, api_key=None, base_url=None, **kwargs):
        super().__init__(model=model, api_key=api_key, base_url=base_url or GROQ_BASE_URL, **kwargs)
