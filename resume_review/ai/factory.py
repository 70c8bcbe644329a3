from resume_review.ai.errors import ConfigurationError
from resume_review.ai.types import ProviderAdapter

from resume_review.ai.providers.claude_provider import ClaudeProvider
from resume_review.ai.providers.gemini_provider import GeminiProvider
from resume_review.ai.providers.groq_provider import GroqProvider
from resume_review.ai.providers.openai_provider import OpenAIProvider

_ADAPTERS: dict[str, type] = {
    "gemini": GeminiProvider,
    "openai": OpenAIProvider,
    "groq": GroqProvider,
    "claude": ClaudeProvider,
}


def get_adapter(provider: str) -> ProviderAdapter:
    adapter_cls = _ADAPTERS.get((provider or "").strip().lower())
    if adapter_cls is None:
        raise ConfigurationError(f"Unsupported AI_PROVIDER='{provider}'")
    return adapter_cls()


def check_credential(adapter: ProviderAdapter, api_key: str | None) -> str:
    """Cheap shape check on the key before any request is made; returns the stripped key."""
    key = (api_key or "").strip()
    if not key:
        raise ConfigurationError(
            f"Missing {adapter.label} API key. Set {adapter.credential_env} in .env and restart the service."
        )
    if adapter.key_prefix and not key.startswith(adapter.key_prefix):
        raise ConfigurationError(
            f'Invalid {adapter.label} API key format. Key should start with "{adapter.key_prefix}". '
            f"Check {adapter.credential_env}."
        )
    return key
