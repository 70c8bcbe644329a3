from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from resume_review.ai.errors import TransportError
from resume_review.ai.types import Prompt, ProviderConfig, ProviderRequest

logger = logging.getLogger(__name__)


def dig(payload: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists, returning None as soon as a step is missing."""
    current = payload
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or len(current) <= step:
                return None
        elif not isinstance(current, dict) or step not in current:
            return None
        current = current[step]
    return current


class BaseAdapter:
    name = ""
    label = ""
    credential_env = ""
    key_prefix = ""

    def build_request(self, prompt: Prompt, config: ProviderConfig, *, stream: bool) -> ProviderRequest:
        raise NotImplementedError

    def extract_delta(self, frame: dict[str, Any]) -> str | None:
        raise NotImplementedError

    def extract_text(self, payload: Any) -> str | None:
        raise NotImplementedError

    def extract_error(self, payload: Any) -> str | None:
        if not isinstance(payload, dict):
            return None
        error = payload.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            return str(message) if message else "Unknown error"
        if isinstance(error, str) and error:
            return error
        return None

    def status_error(self, status: int, body: str) -> TransportError:
        """Turn a non-success response into a TransportError with the best message available."""
        message = f"{self.label} API error: {status}"
        provider_message: str | None = None
        try:
            parsed = json.loads(body) if body else None
        except json.JSONDecodeError:
            parsed = None
        if parsed is not None:
            provider_message = self.extract_error(parsed)
            if provider_message is None and isinstance(parsed, dict) and parsed.get("message"):
                provider_message = str(parsed["message"])
        elif body.strip():
            provider_message = body.strip()

        if provider_message:
            message = provider_message
        if status in (401, 403):
            message = self.auth_error_message(provider_message or str(status))
        return TransportError(message, status=status)

    def auth_error_message(self, detail: str) -> str:
        return (
            f"Invalid API key. Check {self.credential_env} and restart the service. "
            f"Error: {detail}"
        )

    async def complete(
        self, prompt: Prompt, config: ProviderConfig, client: httpx.AsyncClient | None = None
    ) -> str:
        request = self.build_request(prompt, config, stream=False)
        owns_client = client is None
        http = client or httpx.AsyncClient(timeout=config.timeout_s)
        try:
            response = await http.request(
                request.method,
                request.url,
                params=request.params or None,
                headers=request.headers,
                json=request.json,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"Failed to reach {self.label} API: {exc}") from exc
        finally:
            if owns_client:
                await http.aclose()

        if not response.is_success:
            raise self.status_error(response.status_code, response.text)

        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            raise TransportError(f"{self.label} API returned a non-JSON response") from exc

        error = self.extract_error(payload)
        if error:
            raise TransportError(error)
        text = self.extract_text(payload)
        logger.debug("provider_complete provider=%s chars=%s", self.name, len(text or ""))
        return (text or "").strip()
