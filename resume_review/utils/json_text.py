from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def strip_code_fences(text: str) -> str:
    cleaned = (text or "").strip()
    # Some models wrap JSON in markdown fences like ```json ... ```
    if cleaned.startswith("```"):
        cleaned = "\n".join(cleaned.splitlines()[1:])
    if cleaned.endswith("```"):
        cleaned = "\n".join(cleaned.splitlines()[:-1])
    return cleaned.strip()


def loads_model_json(text: str) -> Any:
    """Parse JSON produced by a model, tolerating fences and trailing commentary.

    Raises json.JSONDecodeError when nothing parseable is found.
    """
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as first_error:
        # Some models append commentary after the JSON; cut at the last closing brace.
        last_brace = cleaned.rfind("}")
        if last_brace == -1 or last_brace == len(cleaned) - 1:
            raise
        try:
            parsed = json.loads(cleaned[: last_brace + 1])
        except json.JSONDecodeError:
            raise first_error from None
        logger.debug("model_json_trimmed trailing_chars=%s", len(cleaned) - last_brace - 1)
        return parsed
