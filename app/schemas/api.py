from __future__ import annotations

from pydantic import BaseModel, Field

from app.schemas.analysis import StoredAnalysis, Weights


class SessionRequest(BaseModel):
    session_id: str = Field(min_length=8, max_length=200)


class AnalyzeRequest(SessionRequest):
    # Emptiness is checked by the coordinator so it surfaces as an InputError.
    job_description: str = Field(default="", max_length=120000)
    resume_text: str = Field(default="", max_length=120000)
    weights: Weights = Field(default_factory=Weights)
    file_name: str = Field(default="", max_length=255)


class SignInRequest(SessionRequest):
    access_token: str = Field(min_length=1, max_length=8000)


class ExtractTextResponse(BaseModel):
    file_name: str
    text: str


class HistoryResponse(BaseModel):
    identity: str
    authenticated: bool
    current_id: str | None = None
    items: list[StoredAnalysis] = Field(default_factory=list)
