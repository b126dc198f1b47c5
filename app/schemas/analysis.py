from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from pydantic.alias_generators import to_camel

# Strict: numeric-looking strings and booleans are rejected, ints are accepted.
Score = Annotated[float, Field(strict=True, allow_inf_nan=False)]

SCORE_MIN = 0.0
SCORE_MAX = 100.0


def clamp_score(value: float) -> float:
    return max(SCORE_MIN, min(SCORE_MAX, value))


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Weights(CamelModel):
    skills: float = Field(default=50, ge=0, allow_inf_nan=False)
    experience: float = Field(default=40, ge=0, allow_inf_nan=False)
    education: float = Field(default=10, ge=0, allow_inf_nan=False)


class AnalysisSection(CamelModel):
    model_config = ConfigDict(extra="allow")

    score: Score
    details: StrictStr

    @field_validator("score")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return clamp_score(value)


class AnalysisResult(CamelModel):
    model_config = ConfigDict(extra="allow")

    candidate_name: StrictStr
    overall_score: Score
    summary: StrictStr = ""
    strengths: list[StrictStr] = Field(default_factory=list)
    weaknesses: list[StrictStr] = Field(default_factory=list)
    skills_analysis: AnalysisSection
    experience_analysis: AnalysisSection
    education_analysis: AnalysisSection

    @field_validator("candidate_name")
    @classmethod
    def _validate_candidate_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("candidateName must not be empty")
        return stripped

    @field_validator("overall_score")
    @classmethod
    def _clamp_overall(cls, value: float) -> float:
        return clamp_score(value)

    def section_scores(self) -> tuple[float, float, float]:
        return (
            self.skills_analysis.score,
            self.experience_analysis.score,
            self.education_analysis.score,
        )


class StoredAnalysis(AnalysisResult):
    id: StrictStr
    timestamp: StrictStr
    file_name: StrictStr = ""

    @classmethod
    def from_result(
        cls,
        result: AnalysisResult,
        *,
        record_id: str,
        timestamp: str,
        file_name: str,
    ) -> "StoredAnalysis":
        payload = result.model_dump(by_alias=True)
        payload.update({"id": record_id, "timestamp": timestamp, "fileName": file_name})
        return cls.model_validate(payload)

    def as_result(self) -> AnalysisResult:
        payload = self.model_dump(by_alias=True, exclude={"id", "timestamp", "file_name"})
        return AnalysisResult.model_validate(payload)
