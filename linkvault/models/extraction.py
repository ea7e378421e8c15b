"""Value objects passed between resolvers, the validator and the pipeline."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from linkvault.models.contracts import ImageProvenance, ItemCategory, ItemType


class ExtractedContent(BaseModel):
    """Best-effort result of one platform resolver.

    ``content`` may only be empty when a media field is populated or the
    result is flagged as a placeholder.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    content: str = ""
    source: str
    author: str | None = None
    image_url: str | None = None
    video_url: str | None = None
    embed_html: str | None = None
    image_provenance: ImageProvenance = ImageProvenance.NONE
    is_placeholder: bool = False

    @field_validator("author", "image_url", "video_url", "embed_html", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def check_content_or_media(self) -> ExtractedContent:
        if not self.content.strip() and not self.has_media and not self.is_placeholder:
            raise ValueError("content may only be empty when media is present or for placeholders")
        return self

    @property
    def has_media(self) -> bool:
        return bool(self.image_url or self.video_url or self.embed_html)


class MediaResult(BaseModel):
    """Media found by an independent media fallback chain."""

    image_url: str | None = None
    video_url: str | None = None
    provenance: ImageProvenance = ImageProvenance.NONE

    @property
    def is_empty(self) -> bool:
        return not (self.image_url or self.video_url)


class SummarizerOutput(BaseModel):
    """Contract returned by the external summarizer."""

    title: str
    summary: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    type: ItemType = ItemType.REFERENCE
    category: ItemCategory = ItemCategory.OTHER

    @field_validator("tags", mode="before")
    @classmethod
    def lowercase_tags(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(tag).lower() for tag in value if tag is not None]

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, value: Any) -> Any:
        return value if value in {t.value for t in ItemType} else ItemType.REFERENCE

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, value: Any) -> Any:
        return value if value in {c.value for c in ItemCategory} else ItemCategory.OTHER


class ValidationResult(BaseModel):
    """Outcome of a content validation check."""

    is_valid: bool
    error: str | None = None
    reason: str | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(is_valid=True)

    @classmethod
    def fail(cls, error: str, reason: str) -> ValidationResult:
        return cls(is_valid=False, error=error, reason=reason)


class ItemEnrichment(BaseModel):
    """Every field the pipeline writes to a saved item in its single success update."""

    title: str
    summary: str
    tags: list[str] = Field(default_factory=list)
    type: ItemType
    category: ItemCategory
    raw_content: str
    source: str
    image_url: str | None = None
    domain_id: str | None = None
    author: str | None = None
    embed_html: str | None = None
