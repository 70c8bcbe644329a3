from contextlib import aclosing
from typing import AsyncGenerator
import hashlib
import json
import logging
import time

import httpx

from resume_review.ai.config import load_provider_config
from resume_review.ai.ingestor import StreamIngestor, analyze_resume
from resume_review.ai.types import AnalysisInput, ImageInput, ProviderConfig, TextInput
from resume_review.core import events
from resume_review.core.config import settings
from resume_review.core.profiles import AnalysisProfile, get_profile
from resume_review.schemas.analysis import AnalysisResult
from resume_review.utils.sse import sse

logger = logging.getLogger("resume_review.analysis")


def _short_hash(value: str | bytes | None) -> str:
    if not value:
        return ""
    raw = value.encode("utf-8") if isinstance(value, str) else value
    return hashlib.sha256(raw).hexdigest()[:12]


def _input_fingerprint(analysis_input: AnalysisInput) -> dict[str, object]:
    if isinstance(analysis_input, TextInput):
        return {
            "input": "text",
            "input_len": len(analysis_input.text or ""),
            "input_hash": _short_hash(analysis_input.text),
        }
    if isinstance(analysis_input, ImageInput):
        return {
            "input": "image",
            "media_type": analysis_input.media_type,
            "input_len": len(analysis_input.data),
            "input_hash": _short_hash(analysis_input.data),
        }
    return {"input": type(analysis_input).__name__}


def _resolve(provider: str | None, profile: str | None) -> tuple[ProviderConfig, AnalysisProfile]:
    config = load_provider_config(provider)
    return config, get_profile(profile or settings.analysis_profile, provider=config.provider)


async def run_analysis(
    analysis_input: AnalysisInput,
    *,
    provider: str | None = None,
    profile: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> AnalysisResult:
    config, resolved_profile = _resolve(provider, profile)
    started_at = time.perf_counter()
    result = await analyze_resume(
        analysis_input,
        config,
        profile=resolved_profile,
        client=client,
        max_input_chars=settings.max_input_chars,
    )
    logger.info(
        json.dumps(
            {
                "event": "analysis_complete",
                "provider": config.provider,
                "status": result.status,
                "score": result.score,
                "duration_ms": int((time.perf_counter() - started_at) * 1000),
                **_input_fingerprint(analysis_input),
            }
        )
    )
    return result


async def stream_analysis(
    analysis_input: AnalysisInput,
    *,
    provider: str | None = None,
    profile: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> AsyncGenerator[str, None]:
    started_at = time.perf_counter()
    try:
        yield sse(events.TRACE, "Analyzing resume...")

        config, resolved_profile = _resolve(provider, profile)
        logger.info(
            json.dumps(
                {
                    "event": "analysis_stream_request",
                    "provider": config.provider,
                    "model": config.model,
                    "profile": resolved_profile.name,
                    **_input_fingerprint(analysis_input),
                }
            )
        )

        ingestor = StreamIngestor(
            config,
            profile=resolved_profile,
            client=client,
            max_input_chars=settings.max_input_chars,
        )
        async with aclosing(ingestor.deltas(analysis_input)) as deltas:
            async for delta in deltas:
                yield sse(events.CHUNK, delta)

        outcome = ingestor.outcome
        if outcome is not None and outcome.result is not None:
            yield sse(events.RESULT, outcome.result.model_dump(mode="json"))
        else:
            error = outcome.error if outcome else None
            yield sse(
                events.ERROR,
                {
                    "message": str(error) if error else "Analysis did not complete.",
                    "code": error.code if error else "unknown",
                    "status": error.status_code if error else 500,
                },
            )
        yield sse(events.DONE, "[DONE]")

    except Exception as ex:
        logger.exception(
            json.dumps(
                {
                    "event": "analysis_stream_error",
                    "error": str(ex),
                    "duration_ms": int((time.perf_counter() - started_at) * 1000),
                }
            )
        )
        yield sse(events.ERROR, {"message": str(ex), "code": "internal", "status": 500})
        yield sse(events.DONE, "[DONE]")
    else:
        logger.info(
            json.dumps(
                {
                    "event": "analysis_stream_complete",
                    "outcome": ingestor.outcome.kind if ingestor.outcome else None,
                    "duration_ms": int((time.perf_counter() - started_at) * 1000),
                }
            )
        )
