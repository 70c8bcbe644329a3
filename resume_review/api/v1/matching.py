import httpx
from fastapi import APIRouter, Depends, Request

from resume_review.core.config import settings
from resume_review.core.lifespan import get_http_client
from resume_review.core.rate_limit import rate_limit
from resume_review.schemas.matching import CandidateMatch, MatchScoreRequest, MatchScoreResponse
from resume_review.services.matching_service import matching_config, score_candidates

router = APIRouter()


@router.post("/matching/score", response_model=MatchScoreResponse)
@rate_limit()
async def matching_score(
    request: Request,
    payload: MatchScoreRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    _ = request
    results = await score_candidates(
        payload.vacancy,
        payload.candidates,
        matching_config(payload.provider),
        concurrency=settings.match_concurrency,
        client=client,
    )
    return MatchScoreResponse(
        vacancy_title=payload.vacancy.title,
        matches=[
            CandidateMatch(
                label=candidate.label or f"candidate-{index + 1}",
                score=result.score,
                rationale=result.rationale,
            )
            for index, (candidate, result) in enumerate(zip(payload.candidates, results))
        ],
    )
