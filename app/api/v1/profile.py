from fastapi import APIRouter, HTTPException, Request, status

from app.api.v1.deps import SessionId, get_session, raise_http_error
from app.core.errors import StoreError
from app.schemas.remote import UserProfile, UserProfileUpdate, UserStats
from app.services.session_registry import BrowserSession
from app.storage.remote_store import RemoteStore

router = APIRouter()


def _require_account(session: BrowserSession) -> tuple[RemoteStore, str]:
    identity = session.coordinator.identity
    remote_store = session.remote_store
    if remote_store is None or not identity.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please sign in to manage your profile.",
        )
    return remote_store, identity.user_id


@router.get("/profile", response_model=UserProfile)
async def get_profile(request: Request, session_id: SessionId):
    remote_store, user_id = _require_account(await get_session(request, session_id))
    try:
        profile = await remote_store.get_profile(user_id)
    except StoreError as exc:
        raise_http_error(exc)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found.")
    return profile


@router.put("/profile", response_model=UserProfile)
async def put_profile(request: Request, payload: UserProfileUpdate, session_id: SessionId):
    remote_store, user_id = _require_account(await get_session(request, session_id))
    try:
        profile = await remote_store.update_profile(user_id, payload)
        if profile is None:
            profile = await remote_store.create_profile(user_id, payload)
    except StoreError as exc:
        raise_http_error(exc)
    return profile


@router.get("/profile/stats", response_model=UserStats)
async def get_stats(request: Request, session_id: SessionId):
    remote_store, user_id = _require_account(await get_session(request, session_id))
    try:
        return await remote_store.stats(user_id)
    except StoreError as exc:
        raise_http_error(exc)
