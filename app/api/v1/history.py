from fastapi import APIRouter, HTTPException, Request, status

from app.api.v1.deps import SessionId, get_session, history_response, raise_http_error
from app.core.errors import AnalysisError
from app.schemas.analysis import StoredAnalysis
from app.schemas.api import HistoryResponse, SessionRequest

router = APIRouter()


@router.get("/history", response_model=HistoryResponse)
async def list_history(request: Request, session_id: SessionId):
    session = await get_session(request, session_id)
    return history_response(session.coordinator)


@router.get("/history/{record_id}", response_model=StoredAnalysis)
async def get_history_item(request: Request, record_id: str, session_id: SessionId):
    session = await get_session(request, session_id)
    try:
        record = await session.coordinator.get_record(record_id)
    except AnalysisError as exc:
        raise_http_error(exc)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found.")
    return record


@router.post("/history/{record_id}/select", response_model=HistoryResponse)
async def select_history_item(request: Request, record_id: str, payload: SessionRequest):
    # Unknown ids leave the selection unchanged.
    session = await get_session(request, payload.session_id)
    session.coordinator.select_from_history(record_id)
    return history_response(session.coordinator)


@router.delete("/history/{record_id}", response_model=HistoryResponse)
async def delete_history_item(request: Request, record_id: str, session_id: SessionId):
    session = await get_session(request, session_id)
    try:
        await session.coordinator.delete_from_history(record_id)
    except AnalysisError as exc:
        raise_http_error(exc)
    return history_response(session.coordinator)


@router.delete("/history", response_model=HistoryResponse)
async def clear_history(request: Request, session_id: SessionId):
    session = await get_session(request, session_id)
    try:
        await session.coordinator.clear_history()
    except AnalysisError as exc:
        raise_http_error(exc)
    return history_response(session.coordinator)
