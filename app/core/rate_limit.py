from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def analysis_rate_limit():
    """Per-client limit for endpoints that call the AI provider."""
    return limiter.limit(settings.rate_limit)


def upload_rate_limit():
    return limiter.limit(settings.upload_rate_limit)
