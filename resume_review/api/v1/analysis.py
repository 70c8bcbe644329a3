import httpx
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import StreamingResponse

from resume_review.ai.errors import AnalysisError
from resume_review.ai.types import ImageInput, TextInput
from resume_review.core.config import settings
from resume_review.core.lifespan import get_http_client
from resume_review.core.profiles import load_profiles
from resume_review.core.rate_limit import rate_limit
from resume_review.schemas.analysis import AnalysisResult
from resume_review.schemas.requests import IMAGE_MEDIA_TYPES, AnalysisRequest, ProviderName
from resume_review.services.analysis_service import run_analysis, stream_analysis

router = APIRouter()

TEXT_EXTENSIONS = {"txt", "md"}


def _raise_analysis_error(exc: AnalysisError) -> None:
    raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.post("/analysis", response_model=AnalysisResult)
@rate_limit()
async def analysis_create(
    request: Request,
    payload: AnalysisRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    _ = request
    try:
        return await run_analysis(
            payload.to_input(),
            provider=payload.provider,
            profile=payload.profile,
            client=client,
        )
    except AnalysisError as exc:
        _raise_analysis_error(exc)


@router.post("/analysis/stream")
@rate_limit()
async def analysis_stream(
    request: Request,
    payload: AnalysisRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    _ = request
    gen = stream_analysis(
        payload.to_input(),
        provider=payload.provider,
        profile=payload.profile,
        client=client,
    )

    return StreamingResponse(
        gen,
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/analysis/upload", response_model=AnalysisResult)
@rate_limit()
async def analysis_upload(
    request: Request,
    file: UploadFile = File(...),
    provider: ProviderName | None = Form(default=None),
    profile: str | None = Form(default=None),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    _ = request
    if profile and profile not in load_profiles():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown analysis profile '{profile}'.")
    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Uploaded file is empty.")
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.max_upload_bytes // (1024 * 1024)} MB limit.",
        )

    filename = file.filename or ""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type in IMAGE_MEDIA_TYPES:
        analysis_input = ImageInput(data=content, media_type=content_type)
    elif content_type == "text/plain" or ext in TEXT_EXTENSIONS:
        analysis_input = TextInput(text=content.decode("utf-8", errors="replace"))
    else:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Upload a PNG/JPEG/WEBP image or a plain-text resume. Extract PDF text before uploading.",
        )

    try:
        return await run_analysis(analysis_input, provider=provider, profile=profile, client=client)
    except AnalysisError as exc:
        _raise_analysis_error(exc)
