from __future__ import annotations

import base64
import binascii
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from resume_review.ai.types import AnalysisInput, ImageInput, TextInput
from resume_review.core.profiles import load_profiles

ProviderName = Literal["gemini", "openai", "groq", "claude"]

IMAGE_MEDIA_TYPES = {"image/png", "image/jpeg", "image/webp", "image/gif", "image/bmp"}


class AnalysisRequest(BaseModel):
    text: str | None = Field(default=None, max_length=200_000)
    image_base64: str | None = None
    media_type: str | None = None
    provider: ProviderName | None = None
    profile: str | None = Field(default=None, max_length=64)

    @field_validator("profile")
    @classmethod
    def _known_profile(cls, value: str | None) -> str | None:
        if value and value not in load_profiles():
            raise ValueError(f"Unknown analysis profile '{value}'.")
        return value

    @model_validator(mode="after")
    def _exactly_one_input(self) -> "AnalysisRequest":
        has_text = bool(self.text and self.text.strip())
        has_image = bool(self.image_base64)
        if has_text == has_image:
            raise ValueError("Provide exactly one of 'text' or 'image_base64'.")
        if has_image:
            if self.media_type not in IMAGE_MEDIA_TYPES:
                raise ValueError(
                    f"media_type must be one of: {', '.join(sorted(IMAGE_MEDIA_TYPES))}"
                )
            try:
                base64.b64decode(self.image_base64 or "", validate=True)
            except (binascii.Error, ValueError) as exc:
                raise ValueError("image_base64 is not valid base64.") from exc
        return self

    def to_input(self) -> AnalysisInput:
        if self.image_base64:
            return ImageInput(
                data=base64.b64decode(self.image_base64),
                media_type=self.media_type or "image/png",
            )
        return TextInput(text=self.text or "")


class TranslateRequest(BaseModel):
    text: str = Field(min_length=1, max_length=20_000)
    target_lang: str = Field(default="en", min_length=2, max_length=10)
    provider: ProviderName | None = None


class RewriteRequest(BaseModel):
    text: str = Field(min_length=1, max_length=20_000)
    provider: ProviderName | None = None


class RequirementsRequest(BaseModel):
    description: str = Field(min_length=1, max_length=20_000)
    provider: ProviderName | None = None

    @field_validator("description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("description must not be blank")
        return value


class ContactInfoRequest(BaseModel):
    resume_text: str = Field(min_length=1, max_length=200_000)
    provider: ProviderName | None = None


class TextResponse(BaseModel):
    text: str


class RequirementsResponse(BaseModel):
    requirements: list[str]
