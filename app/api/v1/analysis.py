from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status

from app.api.v1.deps import get_session, raise_http_error
from app.core.errors import AnalysisError
from app.core.rate_limit import analysis_rate_limit, upload_rate_limit
from app.parsing.extract import ExtractionError, MAX_UPLOAD_BYTES, extract_text
from app.schemas.analysis import StoredAnalysis
from app.schemas.api import AnalyzeRequest, ExtractTextResponse

router = APIRouter()


@router.post("/analysis", response_model=StoredAnalysis)
@analysis_rate_limit()
async def create_analysis(request: Request, payload: AnalyzeRequest):
    session = await get_session(request, payload.session_id)
    try:
        return await session.coordinator.submit_analysis(
            payload.job_description,
            payload.resume_text,
            payload.weights,
            file_name=payload.file_name,
        )
    except AnalysisError as exc:
        raise_http_error(exc)


@router.post("/analysis/extract", response_model=ExtractTextResponse)
@upload_rate_limit()
async def extract_resume_text(request: Request, file: UploadFile = File(...)):
    _ = request
    content = await file.read(MAX_UPLOAD_BYTES + 1)
    file_name = file.filename or ""
    try:
        text = extract_text(file_name, content)
    except ExtractionError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ExtractTextResponse(file_name=file_name, text=text)
