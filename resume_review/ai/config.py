from __future__ import annotations

from dataclasses import replace

from resume_review.ai.types import ProviderConfig
from resume_review.core.config import Settings, settings as default_settings


def load_provider_config(
    provider: str | None = None,
    *,
    settings: Settings | None = None,
    one_shot: bool = False,
) -> ProviderConfig:
    """Build an explicit ProviderConfig from application settings.

    `one_shot=True` selects the generation parameters used by auxiliary
    prompts (translation, matching, ...) instead of the résumé analysis ones.
    """
    cfg = settings or default_settings
    name = (provider or cfg.ai_provider).strip().lower()

    credentials = {
        "gemini": (cfg.gemini_api_key, cfg.gemini_base_url, cfg.gemini_model),
        "openai": (cfg.openai_api_key, cfg.openai_base_url, cfg.openai_model),
        "groq": (cfg.groq_api_key, cfg.groq_base_url, cfg.groq_model),
        "claude": (cfg.anthropic_api_key, cfg.anthropic_base_url, cfg.anthropic_model),
    }
    if name not in credentials:
        raise ValueError(f"Unsupported AI provider '{name}'")

    api_key, base_url, model = credentials[name]
    config = ProviderConfig(
        provider=name,
        api_key=api_key,
        base_url=base_url,
        model=model,
        temperature=cfg.analysis_temperature,
        max_output_tokens=cfg.analysis_max_output_tokens,
        timeout_s=cfg.ai_timeout_s,
    )
    if one_shot:
        config = replace(
            config,
            temperature=cfg.generation_temperature,
            max_output_tokens=cfg.generation_max_output_tokens,
            json_output=False,
        )
    return config
