from __future__ import annotations

from typing import Any

from app.core.config import Settings


def cors_options(settings: Settings) -> dict[str, Any]:
    """CORSMiddleware kwargs for the browser front end (no cookies are used)."""
    regex = (settings.cors_allow_origin_regex or "").strip()
    return {
        "allow_origins": list(settings.cors_allowed_origins),
        "allow_origin_regex": regex or None,
        "allow_credentials": False,
        "allow_methods": ["GET", "POST", "PUT", "DELETE"],
        "allow_headers": ["*"],
    }
