from __future__ import annotations

from typing import Any

from resume_review.ai.providers.base import BaseAdapter, dig
from resume_review.ai.types import Prompt, ProviderConfig, ProviderRequest


class GeminiProvider(BaseAdapter):
    name = "gemini"
    label = "Gemini"
    credential_env = "GEMINI_API_KEY"
    key_prefix = "AIza"

    def build_request(self, prompt: Prompt, config: ProviderConfig, *, stream: bool) -> ProviderRequest:
        # Gemini has no separate system role on this endpoint; instructions lead the user turn.
        text = f"{prompt.system}\n\n{prompt.user}" if prompt.system else prompt.user
        parts: list[dict[str, Any]] = [{"text": text}]
        if prompt.image is not None:
            parts.append(
                {
                    "inlineData": {
                        "data": prompt.image.as_base64(),
                        "mimeType": prompt.image.media_type,
                    }
                }
            )

        generation_config: dict[str, Any] = {
            "temperature": config.temperature,
            "topP": config.top_p,
            "maxOutputTokens": config.max_output_tokens,
        }
        if config.json_output:
            generation_config["responseMimeType"] = "application/json"

        method = "streamGenerateContent" if stream else "generateContent"
        params = {"key": (config.api_key or "").strip()}
        if stream:
            params["alt"] = "sse"

        return ProviderRequest(
            url=f"{config.base_url.rstrip('/')}/models/{config.model}:{method}",
            headers={"Content-Type": "application/json"},
            params=params,
            json={
                "contents": [{"role": "user", "parts": parts}],
                "generationConfig": generation_config,
            },
        )

    def extract_delta(self, frame: dict[str, Any]) -> str | None:
        text = dig(frame, "candidates", 0, "content", "parts", 0, "text")
        return text if isinstance(text, str) and text else None

    def extract_text(self, payload: Any) -> str | None:
        return self.extract_delta(payload) if isinstance(payload, dict) else None
