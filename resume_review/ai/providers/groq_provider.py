from __future__ import annotations

from resume_review.ai.providers.openai_provider import OpenAIProvider


class GroqProvider(OpenAIProvider):
    name = "groq"
    label = "Groq"
    credential_env = "GROQ_API_KEY"
    key_prefix = "gsk_"
