from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import replace
from typing import Sequence

import httpx

from resume_review.ai.config import load_provider_config
from resume_review.ai.errors import AnalysisError
from resume_review.ai.generation import generate_content
from resume_review.ai.types import ProviderConfig
from resume_review.schemas.analysis import coerce_score
from resume_review.schemas.matching import CandidateProfile, MatchResult, Vacancy
from resume_review.utils.json_text import loads_model_json

logger = logging.getLogger(__name__)

UNAVAILABLE_RATIONALE = "Matching service unavailable"
MISSING_RATIONALE = "Analysis failed"


def build_match_prompt(vacancy: Vacancy, candidate: CandidateProfile) -> str:
    return (
        "Role: Senior Technical Recruiter.\n"
        "Task: Evaluate the match between a Job Vacancy and a Candidate Profile.\n\n"
        f"Vacancy Title: {vacancy.title}\n"
        f"Vacancy Description: {vacancy.description}\n"
        f"Vacancy Requirements: {', '.join(vacancy.requirements)}\n\n"
        f"Candidate Summary: {candidate.summary}\n"
        f"Candidate Strengths: {', '.join(candidate.strengths)}\n\n"
        "Output JSON ONLY:\n"
        "{\n"
        '  "score": number (0-100),\n'
        '  "rationale": "One sentence explanation of the score."\n'
        "}"
    )


def matching_config(provider: str | None = None) -> ProviderConfig:
    return replace(load_provider_config(provider, one_shot=True), temperature=0.2, json_output=True)


def _clamp(score: int | float) -> int | float:
    return max(0, min(100, score))


async def calculate_match(
    vacancy: Vacancy,
    candidate: CandidateProfile,
    config: ProviderConfig,
    *,
    client: httpx.AsyncClient | None = None,
) -> MatchResult:
    """Score one candidate against a vacancy; any failure degrades to a zero score."""
    try:
        text = await generate_content(build_match_prompt(vacancy, candidate), config, client=client)
        if not text:
            raise ValueError("No response from AI")
        payload = loads_model_json(text)
        if not isinstance(payload, dict):
            raise ValueError("Match response is not a JSON object")
    except (AnalysisError, ValueError) as exc:
        # json.JSONDecodeError is a ValueError
        logger.warning(
            "match_scoring_failed vacancy=%r candidate=%r: %s",
            vacancy.title,
            candidate.label,
            exc,
        )
        return MatchResult(score=0, rationale=UNAVAILABLE_RATIONALE)

    rationale = payload.get("rationale")
    return MatchResult(
        score=_clamp(coerce_score(payload.get("score"))),
        rationale=rationale.strip() if isinstance(rationale, str) and rationale.strip() else MISSING_RATIONALE,
    )


async def score_candidates(
    vacancy: Vacancy,
    candidates: Sequence[CandidateProfile],
    config: ProviderConfig,
    *,
    concurrency: int = 5,
    client: httpx.AsyncClient | None = None,
) -> list[MatchResult]:
    """Score candidates concurrently; results keep the order of `candidates`."""
    sem = asyncio.Semaphore(max(1, concurrency))

    async def limited(candidate: CandidateProfile) -> MatchResult:
        async with sem:
            return await calculate_match(vacancy, candidate, config, client=client)

    results = await asyncio.gather(*[limited(candidate) for candidate in candidates])
    logger.info(
        json.dumps(
            {
                "event": "match_batch_complete",
                "vacancy": vacancy.title,
                "candidates": len(candidates),
                "unavailable": sum(1 for r in results if r.rationale == UNAVAILABLE_RATIONALE),
            }
        )
    )
    return list(results)
