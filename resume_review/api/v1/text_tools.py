import httpx
from fastapi import APIRouter, Depends, HTTPException, Request

from resume_review.ai.config import load_provider_config
from resume_review.ai.errors import AnalysisError
from resume_review.core.lifespan import get_http_client
from resume_review.core.rate_limit import rate_limit
from resume_review.schemas.analysis import ContactInfo
from resume_review.schemas.requests import (
    ContactInfoRequest,
    RequirementsRequest,
    RequirementsResponse,
    RewriteRequest,
    TextResponse,
    TranslateRequest,
)
from resume_review.services.text_tools import (
    extract_contact_info,
    extract_requirements,
    rewrite_text,
    translate_text,
)

router = APIRouter()


def _raise_analysis_error(exc: AnalysisError) -> None:
    raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.post("/text/translate", response_model=TextResponse)
@rate_limit()
async def text_translate(
    request: Request,
    payload: TranslateRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    _ = request
    config = load_provider_config(payload.provider, one_shot=True)
    try:
        text = await translate_text(payload.text, config, payload.target_lang, client=client)
    except AnalysisError as exc:
        _raise_analysis_error(exc)
    return TextResponse(text=text)


@router.post("/text/rewrite", response_model=TextResponse)
@rate_limit()
async def text_rewrite(
    request: Request,
    payload: RewriteRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    _ = request
    config = load_provider_config(payload.provider, one_shot=True)
    try:
        text = await rewrite_text(payload.text, config, client=client)
    except AnalysisError as exc:
        _raise_analysis_error(exc)
    return TextResponse(text=text)


@router.post("/vacancies/extract-requirements", response_model=RequirementsResponse)
@rate_limit()
async def vacancy_extract_requirements(
    request: Request,
    payload: RequirementsRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    _ = request
    config = load_provider_config(payload.provider, one_shot=True)
    try:
        requirements = await extract_requirements(payload.description, config, client=client)
    except AnalysisError as exc:
        _raise_analysis_error(exc)
    return RequirementsResponse(requirements=requirements)


@router.post("/contact-info", response_model=ContactInfo)
@rate_limit()
async def contact_info(
    request: Request,
    payload: ContactInfoRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    _ = request
    config = load_provider_config(payload.provider, one_shot=True)
    return await extract_contact_info(payload.resume_text, config, client=client)
