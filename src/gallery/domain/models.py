from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class PhotoRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    thumbnail_url: str
    author_name: str
    alt_text: str | None = None

    @field_validator("id", "thumbnail_url")
    @classmethod
    def validate_non_empty_text(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("photo id and thumbnail_url must not be empty")
        return text

    @field_validator("alt_text")
    @classmethod
    def validate_alt_text(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        return text or None
