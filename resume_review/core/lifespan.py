from contextlib import asynccontextmanager
import logging

import httpx
from fastapi import Request

from resume_review.core.config import settings
from resume_review.core.profiles import load_profiles

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    profiles = load_profiles()
    logger.info(
        "startup provider=%s profiles=%s timeout_s=%s",
        settings.ai_provider,
        ",".join(sorted(profiles)),
        settings.ai_timeout_s,
    )

    # One pooled client for all provider calls; each request still gets its own ingestor.
    app.state.http_client = httpx.AsyncClient(timeout=settings.ai_timeout_s)
    try:
        yield
    finally:
        await app.state.http_client.aclose()


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client
