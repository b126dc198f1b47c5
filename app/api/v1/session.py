from fastapi import APIRouter, HTTPException, Request, status

from app.api.v1.deps import get_session, history_response, raise_http_error
from app.core.errors import StoreError
from app.schemas.api import HistoryResponse, SessionRequest, SignInRequest

router = APIRouter()


@router.post("/session/sign-in", response_model=HistoryResponse)
async def sign_in(request: Request, payload: SignInRequest):
    session = await get_session(request, payload.session_id)
    remote_store = session.remote_store
    if remote_store is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Accounts are not configured. Running in local-only mode.",
        )
    try:
        user_id = await remote_store.resolve_user_id(payload.access_token)
    except StoreError as exc:
        raise_http_error(exc)

    await session.watcher.sign_in(user_id, payload.access_token)
    return history_response(session.coordinator)


@router.post("/session/sign-out", response_model=HistoryResponse)
async def sign_out(request: Request, payload: SessionRequest):
    session = await get_session(request, payload.session_id)
    await session.watcher.sign_out()
    return history_response(session.coordinator)
