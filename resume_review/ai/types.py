from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Protocol, Union

import httpx


@dataclass(frozen=True)
class TextInput:
    text: str


@dataclass(frozen=True)
class ImageInput:
    data: bytes
    media_type: str

    def as_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def as_data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.as_base64()}"


AnalysisInput = Union[TextInput, ImageInput]


@dataclass(frozen=True)
class Prompt:
    """A single-turn request: system instructions, user text and an optional inline image."""

    user: str
    system: str | None = None
    image: ImageInput | None = None


@dataclass(frozen=True)
class ProviderConfig:
    provider: str
    api_key: str | None
    base_url: str
    model: str
    temperature: float = 0.3
    max_output_tokens: int = 8192
    top_p: float = 1.0
    json_output: bool = True
    timeout_s: float | None = None


@dataclass(frozen=True)
class ProviderRequest:
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)
    json: dict[str, Any] = field(default_factory=dict)
    method: str = "POST"


class ProviderAdapter(Protocol):
    name: str
    label: str
    credential_env: str
    key_prefix: str

    def build_request(
        self, prompt: Prompt, config: ProviderConfig, *, stream: bool
    ) -> ProviderRequest: ...

    def extract_delta(self, frame: dict[str, Any]) -> str | None: ...

    def extract_error(self, payload: Any) -> str | None: ...

    def extract_text(self, payload: Any) -> str | None: ...

    async def complete(
        self, prompt: Prompt, config: ProviderConfig, client: httpx.AsyncClient | None = None
    ) -> str: ...
