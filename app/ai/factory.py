from app.ai.config import load_ai_config
from app.ai.types import AnalysisProvider
from app.core.config import Settings

from app.ai.providers.gemini_provider import GeminiProvider
from app.ai.providers.groq_provider import GroqProvider
from app.ai.providers.openai_provider import OpenAIProvider


def get_analysis_provider(settings: Settings) -> AnalysisProvider:
    cfg = load_ai_config(settings)

    if cfg.provider == "gemini":
        return GeminiProvider(model=cfg.model, api_key=cfg.gemini_api_key)

    if cfg.provider == "groq":
        return GroqProvider(model=cfg.model, api_key=cfg.groq_api_key, timeout_s=cfg.timeout_s)

    if cfg.provider == "openai":
        return OpenAIProvider(
            model=cfg.model,
            api_key=cfg.openai_api_key,
            base_url=cfg.openai_base_url,
            timeout_s=cfg.timeout_s,
        )

    raise ValueError(f"Unsupported AI_PROVIDER='{cfg.provider}'")
