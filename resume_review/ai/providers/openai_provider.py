from __future__ import annotations

from typing import Any

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from resume_review.ai.errors import TransportError
from resume_review.ai.providers.base import BaseAdapter, dig
from resume_review.ai.types import Prompt, ProviderConfig, ProviderRequest


class OpenAIProvider(BaseAdapter):
    """OpenAI chat-completions wire format; also spoken by OpenAI-compatible vendors."""

    name = "openai"
    label = "OpenAI"
    credential_env = "OPENAI_API_KEY"
    key_prefix = "sk-"

    def _messages(self, prompt: Prompt) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = []
        if prompt.system:
            messages.append({"role": "system", "content": prompt.system})
        if prompt.image is None:
            messages.append({"role": "user", "content": prompt.user})
        else:
            messages.append(
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt.user},
                        {"type": "image_url", "image_url": {"url": prompt.image.as_data_url()}},
                    ],
                }
            )
        return messages

    def _create_kwargs(self, prompt: Prompt, config: ProviderConfig) -> dict[str, Any]:
        create_kwargs: dict[str, Any] = {
            "model": config.model,
            "messages": self._messages(prompt),
            "temperature": config.temperature,
            "top_p": config.top_p,
            "max_tokens": config.max_output_tokens,
        }
        if config.json_output:
            create_kwargs["response_format"] = {"type": "json_object"}
        return create_kwargs

    def build_request(self, prompt: Prompt, config: ProviderConfig, *, stream: bool) -> ProviderRequest:
        body = self._create_kwargs(prompt, config)
        body["stream"] = stream
        return ProviderRequest(
            url=f"{config.base_url.rstrip('/')}/chat/completions",
            headers={
                "Authorization": f"Bearer {(config.api_key or '').strip()}",
                "Content-Type": "application/json",
            },
            json=body,
        )

    def extract_delta(self, frame: dict[str, Any]) -> str | None:
        content = dig(frame, "choices", 0, "delta", "content")
        return content if isinstance(content, str) and content else None

    def extract_text(self, payload: Any) -> str | None:
        content = dig(payload, "choices", 0, "message", "content")
        return content if isinstance(content, str) else None

    def _sdk_error_message(self, exc: APIStatusError) -> str:
        body = exc.body
        if isinstance(body, dict):
            message = self.extract_error(body) or body.get("message")
            if message:
                return str(message)
        return f"{self.label} API error: {exc.status_code}"

    async def complete(
        self, prompt: Prompt, config: ProviderConfig, client: httpx.AsyncClient | None = None
    ) -> str:
        owns_client = client is None
        sdk = AsyncOpenAI(
            api_key=(config.api_key or "").strip(),
            base_url=config.base_url,
            timeout=config.timeout_s,
            max_retries=0,
            http_client=client,
        )
        try:
            response = await sdk.chat.completions.create(**self._create_kwargs(prompt, config))
        except APIStatusError as exc:
            message = self._sdk_error_message(exc)
            if exc.status_code in (401, 403):
                message = self.auth_error_message(message)
            raise TransportError(message, status=exc.status_code) from exc
        except APIConnectionError as exc:
            raise TransportError(f"Failed to reach {self.label} API: {exc}") from exc
        finally:
            if owns_client:
                await sdk.close()

        content = response.choices[0].message.content if response.choices else ""
        return (content or "").strip()
