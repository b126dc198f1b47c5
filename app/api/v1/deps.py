from __future__ import annotations

import logging
from typing import Annotated, NoReturn

from fastapi import HTTPException, Query, Request, status

from app.core.errors import AnalysisError, InputError, ProviderError, StoreError, ValidationError
from app.schemas.api import HistoryResponse
from app.services.history_coordinator import HistoryCoordinator
from app.services.session_registry import BrowserSession, SessionRegistry

logger = logging.getLogger("app.api")

SessionId = Annotated[str, Query(min_length=8, max_length=200)]

_STATUS_BY_ERROR: tuple[tuple[type[AnalysisError], int], ...] = (
    (InputError, status.HTTP_400_BAD_REQUEST),
    (ValidationError, status.HTTP_502_BAD_GATEWAY),
    (ProviderError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (StoreError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def get_registry(request: Request) -> SessionRegistry:
    registry = getattr(request.app.state, "sessions", None)
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analysis service is not ready yet.",
        )
    return registry


async def get_session(request: Request, session_id: str) -> BrowserSession:
    return await get_registry(request).get(session_id)


def raise_http_error(exc: AnalysisError) -> NoReturn:
    """Translate an AnalysisError into an HTTP error with its fixed user-facing message."""
    logger.warning("request_failed code=%s: %s", exc.code, exc)
    if exc.code == "invalid_session":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": exc.code, "detail": "Your session has expired. Please sign in again."},
        ) from exc

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, mapped in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = mapped
            break
    raise HTTPException(
        status_code=status_code,
        detail={"code": exc.code, "detail": exc.user_message},
    ) from exc


def history_response(coordinator: HistoryCoordinator) -> HistoryResponse:
    identity = coordinator.identity
    return HistoryResponse(
        identity=identity.label,
        authenticated=identity.is_authenticated,
        current_id=coordinator.state.current_id,
        items=coordinator.history,
    )
