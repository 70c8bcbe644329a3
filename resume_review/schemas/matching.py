from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from resume_review.schemas.analysis import AnalysisResult
from resume_review.schemas.requests import ProviderName

VacancyStatus = Literal["active", "closed", "draft"]


class Vacancy(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=20000)
    requirements: list[str] = Field(default_factory=list)
    status: VacancyStatus = "active"

    @field_validator("requirements")
    @classmethod
    def _clean_requirements(cls, value: list[str]) -> list[str]:
        return [item.strip() for item in value if item and item.strip()]


class CandidateProfile(BaseModel):
    label: str = ""
    summary: str
    strengths: list[str] = Field(default_factory=list)

    @classmethod
    def from_analysis(
        cls, analysis: AnalysisResult, *, label: str = "", strengths_field: str = "keyStrengths"
    ) -> "CandidateProfile":
        return cls(label=label, summary=analysis.summary, strengths=analysis.section(strengths_field))


class MatchResult(BaseModel):
    score: int | float = 0
    rationale: str

    @field_validator("score")
    @classmethod
    def _within_range(cls, value: int | float) -> int | float:
        if not 0 <= value <= 100:
            raise ValueError("score must be between 0 and 100")
        return value


class MatchScoreRequest(BaseModel):
    vacancy: Vacancy
    candidates: list[CandidateProfile] = Field(min_length=1, max_length=50)
    provider: ProviderName | None = None


class CandidateMatch(BaseModel):
    label: str
    score: int | float
    rationale: str


class MatchScoreResponse(BaseModel):
    vacancy_title: str
    matches: list[CandidateMatch]
