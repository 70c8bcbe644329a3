from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from resume_review.ai.errors import ContentValidationError
from resume_review.core.profiles import AnalysisProfile
from resume_review.utils.json_text import loads_model_json

logger = logging.getLogger(__name__)

ResultStatus = Literal["complete", "fallback"]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ContactInfo(BaseModel):
    name: str = "N/A"
    phone: str = "N/A"
    email: str = "N/A"


class AnalysisResult(BaseModel):
    score: int | float = 0
    summary: str
    sections: dict[str, list[str]] = Field(default_factory=dict)
    detected_language: str = "en"
    status: ResultStatus = "complete"
    created_at: str = Field(default_factory=_now_iso)
    contact_info: ContactInfo | None = None

    @field_validator("score")
    @classmethod
    def _validate_score(cls, value: int | float) -> int | float:
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("score must be a finite number")
        return value

    @property
    def is_fallback(self) -> bool:
        return self.status == "fallback"

    def section(self, name: str) -> list[str]:
        return list(self.sections.get(name, []))


def coerce_score(value: Any) -> int | float:
    """Take the raw numeric value; anything missing or non-numeric becomes 0."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0
    else:
        return 0
    if isinstance(number, float):
        if not math.isfinite(number):
            return 0
        if number.is_integer():
            return int(number)
    return number


def coerce_string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    items: list[str] = []
    for item in value:
        if isinstance(item, str):
            items.append(item)
        elif isinstance(item, (int, float)) and not isinstance(item, bool):
            items.append(str(item))
    return items


def validate_analysis_payload(payload: Any, profile: AnalysisProfile) -> AnalysisResult:
    if not isinstance(payload, dict):
        raise ContentValidationError(
            f"Expected a JSON object, got {type(payload).__name__}"
        )

    summary = payload.get("summary")
    language = payload.get("detectedLanguage")
    return AnalysisResult(
        score=coerce_score(payload.get("score")),
        summary=summary if isinstance(summary, str) and summary else profile.default_summary,
        sections={field: coerce_string_list(payload.get(field)) for field in profile.list_fields},
        detected_language=language if isinstance(language, str) and language else "en",
    )


def fallback_result(profile: AnalysisProfile) -> AnalysisResult:
    return AnalysisResult(
        score=0,
        summary=profile.fallback_summary,
        sections={field: [] for field in profile.list_fields},
        status="fallback",
    )


def parse_analysis(content: str, profile: AnalysisProfile) -> AnalysisResult:
    """Validate accumulated model output, degrading to the fallback result on failure."""
    try:
        try:
            payload = loads_model_json(content)
        except json.JSONDecodeError as exc:
            raise ContentValidationError(f"Invalid JSON: {exc.msg}") from exc
        return validate_analysis_payload(payload, profile)
    except ContentValidationError as exc:
        logger.warning(
            "analysis_parse_failed profile=%s content_len=%s: %s",
            profile.name,
            len(content or ""),
            exc,
        )
        return fallback_result(profile)
