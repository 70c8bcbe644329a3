from __future__ import annotations

from typing import Any

from resume_review.ai.providers.base import BaseAdapter, dig
from resume_review.ai.types import Prompt, ProviderConfig, ProviderRequest

ANTHROPIC_VERSION = "2023-06-01"


class ClaudeProvider(BaseAdapter):
    name = "claude"
    label = "Claude"
    credential_env = "ANTHROPIC_API_KEY"
    key_prefix = "sk-ant-"

    def build_request(self, prompt: Prompt, config: ProviderConfig, *, stream: bool) -> ProviderRequest:
        content: list[dict[str, Any]] = []
        if prompt.image is not None:
            content.append(
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": prompt.image.media_type,
                        "data": prompt.image.as_base64(),
                    },
                }
            )
        content.append({"type": "text", "text": prompt.user})

        body: dict[str, Any] = {
            "model": config.model,
            "messages": [{"role": "user", "content": content}],
            "temperature": config.temperature,
            "max_tokens": config.max_output_tokens,
            "stream": stream,
        }
        if prompt.system:
            body["system"] = prompt.system

        return ProviderRequest(
            url=f"{config.base_url.rstrip('/')}/messages",
            headers={
                "x-api-key": (config.api_key or "").strip(),
                "anthropic-version": ANTHROPIC_VERSION,
                "Content-Type": "application/json",
            },
            json=body,
        )

    def extract_delta(self, frame: dict[str, Any]) -> str | None:
        if frame.get("type") != "content_block_delta":
            return None
        text = dig(frame, "delta", "text")
        return text if isinstance(text, str) and text else None

    def extract_text(self, payload: Any) -> str | None:
        blocks = payload.get("content") if isinstance(payload, dict) else None
        if not isinstance(blocks, list):
            return None
        texts = [
            block["text"]
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str)
        ]
        return "".join(texts) if texts else None
