"""Inputs, per-stage results and the outcome of the enrichment pipeline."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from linkvault.models.contracts import ItemOrigin, PipelineStage, PlatformKind
from linkvault.models.extraction import ExtractedContent, SummarizerOutput
from linkvault.services.email_extraction import build_email_extraction, email_url
from linkvault.services.gateways import Badge
from linkvault.utils.url_utils import is_http_url


class SubmissionRequest(BaseModel):
    """A URL to save for a user, optionally with content already extracted."""

    url: str
    user_id: str
    origin: ItemOrigin = ItemOrigin.URL
    note: str | None = None
    pre_extracted: ExtractedContent | None = None

    @field_validator("url")
    @classmethod
    def require_http_url(cls, value: str) -> str:
        value = value.strip()
        if not is_http_url(value):
            raise ValueError(f"Invalid URL format: {value!r}")
        return value

    @field_validator("note", mode="before")
    @classmethod
    def blank_note_to_none(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class EmailSubmission(BaseModel):
    """Forwarded email as delivered by the inbound email transport."""

    text: str | None = None
    sender_domain: str
    subject: str = ""
    html: str | None = None

    def to_submission(self, user_id: str, note: str | None = None) -> SubmissionRequest:
        """Pre-extract the body; short bodies raise ContentValidationError."""
        extracted = build_email_extraction(
            self.text, self.sender_domain, self.subject, html=self.html
        )
        return SubmissionRequest(
            url=email_url(self.sender_domain),
            user_id=user_id,
            origin=ItemOrigin.EMAIL,
            note=note,
            pre_extracted=extracted,
        )


class CreatedStage(BaseModel):
    item_id: int
    url: str
    source: str
    platform: PlatformKind


class ExtractionStage(BaseModel):
    extracted: ExtractedContent
    truncated_content: str


class SummarizationStage(BaseModel):
    summary: SummarizerOutput
    mode: Literal["text", "image"]
    image_url: str | None = None


class ClassificationStage(BaseModel):
    domain_id: str | None = None
    tags: list[str] = Field(default_factory=list)


class ProcessItemResult(BaseModel):
    """What the caller learns about one submission."""

    item_id: int | None = None
    success: bool
    error: str | None = None
    stage: PipelineStage
    new_badges: list[Badge] = Field(default_factory=list)
