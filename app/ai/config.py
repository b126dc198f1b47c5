from dataclasses import dataclass

from app.core.config import Settings


@dataclass(frozen=True)
class AIConfig:
    provider: str
    model: str | None
    timeout_s: float
    gemini_api_key: str | None
    groq_api_key: str | None
    openai_api_key: str | None
    openai_base_url: str | None


def load_ai_config(settings: Settings) -> AIConfig:
    return AIConfig(
        provider=settings.ai_provider.strip().lower(),
        model=(settings.ai_model or "").strip() or None,
        timeout_s=settings.ai_timeout_s,
        gemini_api_key=settings.gemini_api_key,
        groq_api_key=settings.groq_api_key,
        openai_api_key=settings.openai_api_key,
        openai_base_url=settings.openai_base_url,
    )
