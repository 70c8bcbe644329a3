from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

_PROFILES_CACHE: dict[str, "AnalysisProfile"] | None = None
_PROFILES_PATH = Path(__file__).resolve().parents[2] / "config" / "profiles.yaml"

DEFAULT_PROFILE_BY_PROVIDER = {
    "gemini": "career_review",
    "openai": "ats_review",
    "groq": "ats_review",
    "claude": "ats_review",
}


class UnknownProfileError(ValueError):
    pass


@dataclass(frozen=True)
class AnalysisProfile:
    """Prompt text and result field set used for one kind of résumé review."""

    name: str
    system_prompt: str
    text_instruction: str
    image_instruction: str
    list_fields: tuple[str, ...]
    default_summary: str
    fallback_summary: str


def _build_profile(name: str, raw: Any) -> AnalysisProfile:
    if not isinstance(raw, dict):
        raise RuntimeError(f"Invalid analysis profile '{name}': expected a mapping.")

    missing = [
        key
        for key in ("system_prompt", "text_instruction", "image_instruction", "list_fields")
        if not raw.get(key)
    ]
    if missing:
        raise RuntimeError(f"Analysis profile '{name}' is missing: {', '.join(missing)}")

    list_fields = raw["list_fields"]
    if not isinstance(list_fields, list) or not all(isinstance(item, str) for item in list_fields):
        raise RuntimeError(f"Analysis profile '{name}': list_fields must be a list of strings.")

    return AnalysisProfile(
        name=name,
        system_prompt=str(raw["system_prompt"]).strip(),
        text_instruction=str(raw["text_instruction"]).strip(),
        image_instruction=str(raw["image_instruction"]).strip(),
        list_fields=tuple(list_fields),
        default_summary=str(raw.get("default_summary") or "AI could not generate a summary."),
        fallback_summary=str(
            raw.get("fallback_summary")
            or "Failed to parse AI response. Try again or check resume format."
        ),
    )


def load_profiles() -> dict[str, AnalysisProfile]:
    """Load analysis profiles from repo-level config/profiles.yaml and cache them."""
    global _PROFILES_CACHE

    if _PROFILES_CACHE is not None:
        return _PROFILES_CACHE

    if not _PROFILES_PATH.exists():
        raise RuntimeError(
            f"Analysis profiles not found at '{_PROFILES_PATH}'. "
            "Expected file: config/profiles.yaml"
        )

    import yaml

    try:
        raw = _PROFILES_PATH.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(
            f"Failed to read analysis profiles '{_PROFILES_PATH}': {exc}"
        ) from exc

    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise RuntimeError(
            f"Invalid YAML in analysis profiles '{_PROFILES_PATH}': {exc}"
        ) from exc

    profiles = parsed.get("profiles") if isinstance(parsed, dict) else None
    if not isinstance(profiles, dict) or not profiles:
        raise RuntimeError(
            f"Invalid analysis profiles '{_PROFILES_PATH}': expected a top-level 'profiles' mapping."
        )

    _PROFILES_CACHE = {name: _build_profile(name, body) for name, body in profiles.items()}
    return _PROFILES_CACHE


def get_profile(name: str | None = None, *, provider: str | None = None) -> AnalysisProfile:
    """Resolve a profile by name, falling back to the provider's default profile."""
    profiles = load_profiles()
    resolved = (name or "").strip() or DEFAULT_PROFILE_BY_PROVIDER.get(provider or "", "career_review")
    if resolved not in profiles:
        raise UnknownProfileError(
            f"Unknown analysis profile '{resolved}'. Known: {', '.join(sorted(profiles))}"
        )
    return profiles[resolved]
