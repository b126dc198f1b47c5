from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

SCORE_POLICIES = {"trust", "recompute"}


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    ai_provider: str
    ai_model: str | None
    ai_timeout_s: float
    gemini_api_key: str | None
    groq_api_key: str | None
    openai_api_key: str | None
    openai_base_url: str | None
    score_policy: str
    score_tolerance: float
    local_store_db_path: str
    local_history_max_records: int
    supabase_url: str | None
    supabase_anon_key: str | None
    remote_timeout_s: float
    rate_limit: str
    upload_rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None

    @property
    def remote_store_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


def load_settings() -> Settings:
    loaded = Settings(
        ai_provider=(_get_env("AI_PROVIDER", "gemini") or "gemini").strip().lower(),
        ai_model=_get_env("AI_MODEL"),
        ai_timeout_s=_get_env_float("AI_TIMEOUT_S", 60.0),
        gemini_api_key=_get_env("GEMINI_API_KEY"),
        groq_api_key=_get_env("GROQ_API_KEY"),
        openai_api_key=_get_env("OPENAI_API_KEY"),
        openai_base_url=_get_env("OPENAI_BASE_URL"),
        score_policy=(_get_env("SCORE_POLICY", "trust") or "trust").strip().lower(),
        score_tolerance=_get_env_float("SCORE_TOLERANCE", 1.0),
        local_store_db_path=_get_env("LOCAL_STORE_DB_PATH", "data/local_history.db") or "data/local_history.db",
        local_history_max_records=_get_env_int("LOCAL_HISTORY_MAX_RECORDS", 100),
        supabase_url=_get_env("SUPABASE_URL"),
        supabase_anon_key=_get_env("SUPABASE_ANON_KEY"),
        remote_timeout_s=_get_env_float("REMOTE_TIMEOUT_S", 15.0),
        rate_limit=_get_env("RATE_LIMIT", "20/minute") or "20/minute",
        upload_rate_limit=_get_env("UPLOAD_RATE_LIMIT", "30/minute") or "30/minute",
        rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
        log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
        sentry_dsn=_get_env("SENTRY_DSN"),
        cors_allowed_origins=_get_env_list(
            "CORS_ALLOWED_ORIGINS",
            [
                "http://localhost:5173",
                "http://127.0.0.1:5173",
                "http://localhost:3000",
            ],
        ),
        cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX"),
    )

    if loaded.score_policy not in SCORE_POLICIES:
        raise RuntimeError("SCORE_POLICY must be either 'trust' or 'recompute'.")

    return loaded


settings = load_settings()
