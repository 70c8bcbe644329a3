from __future__ import annotations

import logging
import time

import httpx

from resume_review.ai.errors import AnalysisError
from resume_review.ai.factory import check_credential, get_adapter
from resume_review.ai.types import Prompt, ProviderAdapter, ProviderConfig

logger = logging.getLogger(__name__)


async def generate_content(
    prompt: str | Prompt,
    config: ProviderConfig,
    *,
    adapter: ProviderAdapter | None = None,
    client: httpx.AsyncClient | None = None,
    system: str | None = None,
) -> str:
    """Single non-streaming request; returns the model's text (possibly empty).

    Raises ConfigurationError / TransportError like the streaming path, but
    never substitutes a fallback: callers decide what to do with raw text.
    """
    resolved = adapter or get_adapter(config.provider)
    check_credential(resolved, config.api_key)
    request_prompt = prompt if isinstance(prompt, Prompt) else Prompt(user=prompt, system=system)

    started = time.perf_counter()
    try:
        text = await resolved.complete(request_prompt, config, client)
    except AnalysisError as exc:
        logger.warning(
            "generate_content_failed provider=%s model=%s prompt_len=%s code=%s: %s",
            resolved.name,
            config.model,
            len(request_prompt.user),
            exc.code,
            exc,
        )
        raise
    logger.info(
        "generate_content provider=%s model=%s prompt_len=%s response_len=%s latency_ms=%s",
        resolved.name,
        config.model,
        len(request_prompt.user),
        len(text),
        int((time.perf_counter() - started) * 1000),
    )
    return text
