from __future__ import annotations

import logging
from dataclasses import replace

import httpx

from resume_review.ai.errors import AnalysisError
from resume_review.ai.generation import generate_content
from resume_review.ai.types import ProviderConfig
from resume_review.schemas.analysis import ContactInfo
from resume_review.utils.json_text import loads_model_json

logger = logging.getLogger(__name__)

CONTACT_INPUT_CHARS = 2000

LANGUAGE_NAMES = {
    "en": "English",
    "ru": "Russian",
    "es": "Spanish",
    "de": "German",
    "fr": "French",
    "it": "Italian",
}


def _language_name(code: str) -> str:
    normalized = (code or "en").split("-")[0].strip().lower()
    return LANGUAGE_NAMES.get(normalized, code)


async def translate_text(
    text: str,
    config: ProviderConfig,
    target_lang: str = "en",
    *,
    client: httpx.AsyncClient | None = None,
) -> str:
    prompt = (
        f"Translate the following text to {_language_name(target_lang)}. "
        f'Return ONLY the translated text, no explanations.\n\n"{text}"'
    )
    return await generate_content(prompt, config, client=client)


async def rewrite_text(
    text: str,
    config: ProviderConfig,
    *,
    client: httpx.AsyncClient | None = None,
) -> str:
    prompt = (
        "Rewrite the following text to be more professional, impactful, and suitable for a CV. "
        "Improve clarity and action verbs. Return ONLY the rewritten text, no explanations."
        f'\n\n"{text}"'
    )
    return await generate_content(prompt, config, client=client)


def split_requirements(raw: str) -> list[str]:
    seen: set[str] = set()
    items: list[str] = []
    for part in raw.replace("\n", ",").split(","):
        item = part.strip().strip("-*•").strip()
        key = item.lower()
        if not item or key in seen:
            continue
        seen.add(key)
        items.append(item)
    return items


async def extract_requirements(
    description: str,
    config: ProviderConfig,
    *,
    client: httpx.AsyncClient | None = None,
) -> list[str]:
    prompt = (
        "Extract key technical skills and requirements from this job description. "
        f"Return them as a comma-separated list. Description: {description}"
    )
    return split_requirements(await generate_content(prompt, config, client=client))


async def extract_contact_info(
    resume_text: str,
    config: ProviderConfig,
    *,
    client: httpx.AsyncClient | None = None,
) -> ContactInfo:
    """Pull name/phone/email out of a résumé; unknown or failed fields are "N/A"."""
    prompt = (
        "Extract the contact information from this resume. "
        "Return ONLY a JSON object with this exact structure:\n"
        '{\n  "name": "Full Name",\n  "phone": "Phone Number",\n  "email": "Email Address"\n}\n\n'
        'If any field is not found, use "N/A" as the value.\n\n'
        f'Resume:\n"""\n{resume_text[:CONTACT_INPUT_CHARS]}\n"""'
    )
    try:
        text = await generate_content(prompt, replace(config, json_output=True), client=client)
        parsed = loads_model_json(text)
    except (AnalysisError, ValueError) as exc:
        logger.warning("contact_extraction_failed: %s", exc)
        return ContactInfo()
    if not isinstance(parsed, dict):
        return ContactInfo()

    def _field(name: str) -> str:
        value = parsed.get(name)
        return value.strip() if isinstance(value, str) and value.strip() else "N/A"

    return ContactInfo(name=_field("name"), phone=_field("phone"), email=_field("email"))
