"""Checks that reject placeholder or degenerate extraction and summarizer output.

Rules run in order and the first failing rule decides the result. An
extraction that carries media but little or no text passes the emptiness and
length rules so image-only posts still go through.
"""

from __future__ import annotations

from linkvault.constants import (
    EXTRACTION_FAILURE_PHRASES,
    FAILURE_TAGS,
    MIN_CONTENT_CHARS,
    MIN_SINGLE_BULLET_CHARS,
    SUMMARY_FALLBACK_PHRASES,
    UNKNOWN_AUTHOR,
)
from linkvault.models.extraction import ExtractedContent, SummarizerOutput, ValidationResult

EXTRACTION_FAILED = "Content extraction failed"
INSUFFICIENT_CONTENT = "Insufficient content"
PROCESSING_FAILED = "Content processing failed"


def validate_extracted_content(extracted: ExtractedContent) -> ValidationResult:
    content = extracted.content.strip()
    media_only = extracted.has_media

    if not content and not media_only:
        return ValidationResult.fail(
            EXTRACTION_FAILED, "No content could be extracted from this URL"
        )

    lowered = content.lower()
    if any(phrase in lowered for phrase in EXTRACTION_FAILURE_PHRASES):
        return ValidationResult.fail(
            EXTRACTION_FAILED, "The content could not be extracted from this URL"
        )

    if extracted.author == UNKNOWN_AUTHOR:
        return ValidationResult.fail(
            EXTRACTION_FAILED, "Unable to identify the author of this content"
        )

    if len(content) < MIN_CONTENT_CHARS and not media_only:
        return ValidationResult.fail(
            INSUFFICIENT_CONTENT, "The extracted content is too short to be meaningful"
        )

    return ValidationResult.ok()


def validate_summarized_content(summarized: SummarizerOutput) -> ValidationResult:
    summary_text = " ".join(summarized.summary).lower()
    if any(phrase in summary_text for phrase in SUMMARY_FALLBACK_PHRASES):
        return ValidationResult.fail(
            PROCESSING_FAILED, "Unable to generate a meaningful summary for this content"
        )

    if FAILURE_TAGS.intersection(summarized.tags):
        return ValidationResult.fail(
            PROCESSING_FAILED, "The content could not be processed successfully"
        )

    if len(summarized.summary) == 1 and len(summarized.summary[0]) < MIN_SINGLE_BULLET_CHARS:
        return ValidationResult.fail(
            INSUFFICIENT_CONTENT, "The processed content is too minimal to be useful"
        )

    return ValidationResult.ok()


def validate_item_data(
    extracted: ExtractedContent, summarized: SummarizerOutput
) -> ValidationResult:
    """Validate extraction first, then the summary."""
    result = validate_extracted_content(extracted)
    if not result.is_valid:
        return result
    return validate_summarized_content(summarized)
