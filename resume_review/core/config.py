from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float | None) -> float | None:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    ai_provider: str
    analysis_profile: str | None
    gemini_api_key: str | None
    gemini_base_url: str
    gemini_model: str
    openai_api_key: str | None
    openai_base_url: str
    openai_model: str
    groq_api_key: str | None
    groq_base_url: str
    groq_model: str
    anthropic_api_key: str | None
    anthropic_base_url: str
    anthropic_model: str
    analysis_temperature: float
    analysis_max_output_tokens: int
    generation_temperature: float
    generation_max_output_tokens: int
    ai_timeout_s: float | None
    max_input_chars: int
    match_concurrency: int
    rate_limit: str
    rate_limit_enabled: bool
    analysis_rate_limit: str
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    cors_allow_credentials: bool
    max_upload_bytes: int


settings = Settings(
    ai_provider=(_get_env("AI_PROVIDER", "gemini") or "gemini").strip().lower(),
    analysis_profile=_get_env("ANALYSIS_PROFILE"),
    gemini_api_key=_get_env("GEMINI_API_KEY"),
    gemini_base_url=_get_env("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
    or "https://generativelanguage.googleapis.com/v1beta",
    gemini_model=_get_env("GEMINI_MODEL", "gemini-2.0-flash-exp") or "gemini-2.0-flash-exp",
    openai_api_key=_get_env("OPENAI_API_KEY"),
    openai_base_url=_get_env("OPENAI_BASE_URL", "https://api.openai.com/v1") or "https://api.openai.com/v1",
    openai_model=_get_env("OPENAI_MODEL", "gpt-4o-mini") or "gpt-4o-mini",
    groq_api_key=_get_env("GROQ_API_KEY"),
    groq_base_url=_get_env("GROQ_BASE_URL", "https://api.groq.com/openai/v1") or "https://api.groq.com/openai/v1",
    groq_model=_get_env("GROQ_MODEL", "llama-3.1-70b-versatile") or "llama-3.1-70b-versatile",
    anthropic_api_key=_get_env("ANTHROPIC_API_KEY"),
    anthropic_base_url=_get_env("ANTHROPIC_BASE_URL", "https://api.anthropic.com/v1") or "https://api.anthropic.com/v1",
    anthropic_model=_get_env("ANTHROPIC_MODEL", "claude-3-5-sonnet-latest") or "claude-3-5-sonnet-latest",
    analysis_temperature=_get_env_float("ANALYSIS_TEMPERATURE", 0.3) or 0.0,
    analysis_max_output_tokens=_get_env_int("ANALYSIS_MAX_OUTPUT_TOKENS", 8192),
    generation_temperature=_get_env_float("GENERATION_TEMPERATURE", 0.4) or 0.0,
    generation_max_output_tokens=_get_env_int("GENERATION_MAX_OUTPUT_TOKENS", 2048),
    ai_timeout_s=_get_env_float("AI_TIMEOUT_S", None),
    max_input_chars=_get_env_int("MAX_INPUT_CHARS", 12000),
    match_concurrency=_get_env_int("MATCH_CONCURRENCY", 5),
    rate_limit=_get_env("RATE_LIMIT", "60/minute") or "60/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    analysis_rate_limit=_get_env("ANALYSIS_RATE_LIMIT", "10/minute") or "10/minute",
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ],
    ),
    cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX"),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", False),
    max_upload_bytes=_get_env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
)

if settings.ai_provider not in {"gemini", "openai", "groq", "claude"}:
    raise RuntimeError("AI_PROVIDER must be one of: gemini, openai, groq, claude.")
