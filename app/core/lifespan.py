from contextlib import asynccontextmanager
import logging

from app.ai.factory import get_analysis_provider
from app.core.config import settings
from app.services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    provider = get_analysis_provider(settings)
    logger.info("analysis_provider_ready provider=%s model=%s", provider.name, provider.model)

    registry = SessionRegistry.from_settings(settings, provider)
    app.state.sessions = registry
    try:
        yield
    finally:
        app.state.sessions = None
        await registry.close()
