from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from app.schemas.analysis import AnalysisResult, StoredAnalysis, Weights

REMOTE_FILE_NAME = "Saved Analysis"
UNKNOWN_CANDIDATE = "Unknown candidate"


class SectionRow(BaseModel):
    score: float
    details: str = ""


class AnalysisResultRow(BaseModel):
    """A row of the ``analysis_results`` table."""

    id: str | None = None
    user_id: str
    job_description: str
    resume_text: str
    candidate_name: str | None = None
    overall_score: float
    summary: str = ""
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    skills_analysis: SectionRow
    experience_analysis: SectionRow
    education_analysis: SectionRow
    weights: dict[str, float] = Field(default_factory=dict)
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_result(
        cls,
        result: AnalysisResult,
        *,
        user_id: str,
        job_description: str,
        resume_text: str,
        weights: Weights,
    ) -> "AnalysisResultRow":
        return cls(
            user_id=user_id,
            job_description=job_description,
            resume_text=resume_text,
            candidate_name=result.candidate_name,
            overall_score=result.overall_score,
            summary=result.summary,
            strengths=list(result.strengths),
            weaknesses=list(result.weaknesses),
            skills_analysis=SectionRow(**result.skills_analysis.model_dump(include={"score", "details"})),
            experience_analysis=SectionRow(**result.experience_analysis.model_dump(include={"score", "details"})),
            education_analysis=SectionRow(**result.education_analysis.model_dump(include={"score", "details"})),
            weights=weights.model_dump(),
        )

    def insert_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude={"id", "created_at", "updated_at"})

    def to_stored(self) -> StoredAnalysis:
        return StoredAnalysis.model_validate(
            {
                "id": str(self.id or ""),
                "timestamp": self.created_at or "",
                "fileName": REMOTE_FILE_NAME,
                "candidateName": self.candidate_name or UNKNOWN_CANDIDATE,
                "overallScore": self.overall_score,
                "summary": self.summary,
                "strengths": self.strengths,
                "weaknesses": self.weaknesses,
                "skillsAnalysis": self.skills_analysis.model_dump(),
                "experienceAnalysis": self.experience_analysis.model_dump(),
                "educationAnalysis": self.education_analysis.model_dump(),
            }
        )


class UserProfile(BaseModel):
    id: str | None = None
    user_id: str
    full_name: str | None = None
    avatar_url: str | None = None
    company: str | None = None
    role: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class UserProfileUpdate(BaseModel):
    full_name: str | None = Field(default=None, max_length=200)
    avatar_url: str | None = Field(default=None, max_length=2000)
    company: str | None = Field(default=None, max_length=200)
    role: str | None = Field(default=None, max_length=200)


class ScorePoint(BaseModel):
    overall_score: float
    created_at: str | None = None


class UserStats(BaseModel):
    total_analyses: int
    average_score: int
    recent_analyses: list[ScorePoint] = Field(default_factory=list)
    score_trend: list[float] = Field(default_factory=list)
