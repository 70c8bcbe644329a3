"""
Streaming ingestion of a résumé analysis from a generative-AI provider.

One `StreamIngestor` drives exactly one request: it checks the credential,
opens the provider's event stream, turns frames into text deltas through the
provider adapter, and validates the accumulated text into an
`AnalysisResult` once the stream ends. Three ways to consume it:

* `deltas()`   - async generator of progress deltas; `outcome` afterwards.
* `ingest()`   - callback style: on_progress / on_complete / on_error.
* `analyze_resume()` - awaitable that returns the result or raises.

Instances are single-use and share nothing, so concurrent analyses each get
their own ingestor.
"""
from __future__ import annotations

import logging
import time
from contextlib import aclosing
from dataclasses import dataclass
from enum import Enum
from typing import AsyncGenerator, Callable, Literal

import httpx

from resume_review.ai.errors import (
    AnalysisError,
    EmptyStreamError,
    FrameDecodeError,
    InvalidInputError,
    TransportError,
)
from resume_review.ai.factory import check_credential, get_adapter
from resume_review.ai.frames import FrameBuffer, FrameKind, classify_line, decode_frame
from resume_review.ai.types import (
    AnalysisInput,
    ImageInput,
    Prompt,
    ProviderAdapter,
    ProviderConfig,
    ProviderRequest,
    TextInput,
)
from resume_review.core.profiles import AnalysisProfile, get_profile
from resume_review.schemas.analysis import AnalysisResult, parse_analysis

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 12000

OutcomeKind = Literal["success", "fallback", "error"]


class IngestState(str, Enum):
    IDLE = "idle"
    AWAITING_HEADERS = "awaiting_headers"
    STREAMING = "streaming"
    FLUSHING = "flushing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class IngestOutcome:
    kind: OutcomeKind
    result: AnalysisResult | None = None
    error: AnalysisError | None = None

    @property
    def ok(self) -> bool:
        return self.kind != "error"


def build_analysis_prompt(
    analysis_input: AnalysisInput,
    profile: AnalysisProfile,
    max_input_chars: int = MAX_INPUT_CHARS,
) -> Prompt:
    if isinstance(analysis_input, TextInput):
        text = analysis_input.text or ""
        if not text.strip():
            raise InvalidInputError("Resume text is empty.")
        truncated = text[:max_input_chars]
        return Prompt(
            system=profile.system_prompt,
            user=f'{profile.text_instruction}\nResume:\n"""\n{truncated}\n"""',
        )
    if isinstance(analysis_input, ImageInput):
        if not analysis_input.data:
            raise InvalidInputError("Resume image is empty.")
        if not analysis_input.media_type.startswith("image/"):
            raise InvalidInputError(f"Unsupported image type '{analysis_input.media_type}'.")
        return Prompt(
            system=profile.system_prompt,
            user=profile.image_instruction,
            image=analysis_input,
        )
    raise InvalidInputError(f"Unsupported analysis input: {type(analysis_input).__name__}")


class StreamIngestor:
    def __init__(
        self,
        config: ProviderConfig,
        *,
        adapter: ProviderAdapter | None = None,
        profile: AnalysisProfile | None = None,
        client: httpx.AsyncClient | None = None,
        max_input_chars: int = MAX_INPUT_CHARS,
    ):
        self._config = config
        self._adapter = adapter or get_adapter(config.provider)
        self._profile = profile or get_profile(provider=config.provider)
        self._client = client
        self._max_input_chars = max_input_chars
        self._state = IngestState.IDLE
        self._chunks: list[str] = []
        self._bytes_received = 0
        self._outcome: IngestOutcome | None = None
        self._started_at = 0.0

    @property
    def state(self) -> IngestState:
        return self._state

    @property
    def outcome(self) -> IngestOutcome | None:
        return self._outcome

    async def deltas(self, analysis_input: AnalysisInput) -> AsyncGenerator[str, None]:
        if self._state is not IngestState.IDLE:
            raise RuntimeError("StreamIngestor instances are single-use; create a new one per call.")
        self._state = IngestState.AWAITING_HEADERS
        self._started_at = time.perf_counter()

        try:
            check_credential(self._adapter, self._config.api_key)
            prompt = build_analysis_prompt(analysis_input, self._profile, self._max_input_chars)
            request = self._adapter.build_request(prompt, self._config, stream=True)
        except AnalysisError as exc:
            self._fail(exc)
            return

        logger.info(
            "stream_ingest_start provider=%s model=%s input=%s profile=%s",
            self._adapter.name,
            self._config.model,
            "image" if prompt.image is not None else "text",
            self._profile.name,
        )

        owns_client = self._client is None
        client = self._client or httpx.AsyncClient(timeout=self._config.timeout_s)
        try:
            async with self._open(client, request) as response:
                if not response.is_success:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise self._adapter.status_error(response.status_code, body)

                self._state = IngestState.STREAMING
                buffer = FrameBuffer()
                async for chunk in response.aiter_bytes():
                    self._bytes_received += len(chunk)
                    for line in buffer.feed(chunk):
                        delta = self._handle_line(line)
                        if delta:
                            yield delta
                            self._chunks.append(delta)

                self._state = IngestState.FLUSHING
                for line in buffer.flush():
                    delta = self._handle_line(line)
                    if delta:
                        yield delta
                        self._chunks.append(delta)
        except (httpx.HTTPError, httpx.StreamError) as exc:
            self._fail(self._transport_error(exc))
            return
        except AnalysisError as exc:
            self._fail(exc)
            return
        finally:
            if owns_client:
                await client.aclose()

        self._finish()

    async def ingest(
        self,
        analysis_input: AnalysisInput,
        on_progress: Callable[[str], None] | None = None,
        on_complete: Callable[[AnalysisResult], None] | None = None,
        on_error: Callable[[str], None] | None = None,
    ) -> IngestOutcome:
        async with aclosing(self.deltas(analysis_input)) as deltas:
            async for delta in deltas:
                if on_progress is not None:
                    on_progress(delta)

        outcome = self._outcome
        if outcome is None:
            raise RuntimeError("Ingestion ended without an outcome.")
        if outcome.error is not None:
            if on_error is not None:
                on_error(outcome.error.message)
        elif on_complete is not None and outcome.result is not None:
            on_complete(outcome.result)
        return outcome

    def _open(self, client: httpx.AsyncClient, request: ProviderRequest):
        return client.stream(
            request.method,
            request.url,
            params=request.params or None,
            headers=request.headers,
            json=request.json,
        )

    def _handle_line(self, line: str) -> str | None:
        frame = classify_line(line)
        if frame is None or frame.kind is not FrameKind.DATA:
            return None
        try:
            decoded = decode_frame(frame)
        except FrameDecodeError as exc:
            logger.warning("stream_frame_skipped provider=%s: %s", self._adapter.name, exc)
            return None
        if decoded is None:
            return None

        error = self._adapter.extract_error(decoded)
        if error:
            raise TransportError(error, code="provider_error")
        return self._adapter.extract_delta(decoded)

    def _transport_error(self, exc: Exception) -> TransportError:
        detail = str(exc) or type(exc).__name__
        if self._state is IngestState.AWAITING_HEADERS:
            message = f"Failed to reach {self._adapter.label} API: {detail}"
        else:
            message = f"Stream error: {detail}"
        error = TransportError(message)
        error.__cause__ = exc
        return error

    def _finish(self) -> None:
        text = "".join(self._chunks).strip()
        if self._bytes_received == 0 or not text:
            self._fail(EmptyStreamError(f"No data received from {self._adapter.label} API"))
            return

        result = parse_analysis(text, self._profile)
        self._state = IngestState.COMPLETED
        self._outcome = IngestOutcome(
            kind="fallback" if result.is_fallback else "success",
            result=result,
        )
        logger.info(
            "stream_ingest_complete provider=%s status=%s chunks=%s bytes=%s duration_ms=%s",
            self._adapter.name,
            result.status,
            len(self._chunks),
            self._bytes_received,
            int((time.perf_counter() - self._started_at) * 1000),
        )

    def _fail(self, exc: AnalysisError) -> None:
        self._state = IngestState.FAILED
        self._outcome = IngestOutcome(kind="error", error=exc)
        logger.warning(
            "stream_ingest_failed provider=%s code=%s: %s",
            self._adapter.name,
            exc.code,
            exc,
        )


async def analyze_resume(
    analysis_input: AnalysisInput,
    config: ProviderConfig,
    *,
    profile: AnalysisProfile | None = None,
    client: httpx.AsyncClient | None = None,
    on_progress: Callable[[str], None] | None = None,
    max_input_chars: int = MAX_INPUT_CHARS,
) -> AnalysisResult:
    """Run one streaming analysis and return its result, raising AnalysisError on failure."""
    ingestor = StreamIngestor(
        config,
        profile=profile,
        client=client,
        max_input_chars=max_input_chars,
    )
    outcome = await ingestor.ingest(analysis_input, on_progress=on_progress)
    if outcome.error is not None:
        raise outcome.error
    if outcome.result is None:
        raise RuntimeError("Ingestion completed without a result.")
    return outcome.result
