"""Tests for extraction and summary validation rules."""

import pytest

from linkvault.constants import INSTAGRAM_PLACEHOLDER, TWEET_PLACEHOLDER
from linkvault.models.extraction import ExtractedContent, SummarizerOutput
from linkvault.services.content_validator import (
    EXTRACTION_FAILED,
    INSUFFICIENT_CONTENT,
    PROCESSING_FAILED,
    validate_extracted_content,
    validate_item_data,
    validate_summarized_content,
)


def _extracted(content: str, **kwargs) -> ExtractedContent:
    return ExtractedContent(title="Title", content=content, source="example.com", **kwargs)


def _summary(summary=None, tags=None) -> SummarizerOutput:
    return SummarizerOutput(
        title="Summary",
        summary=summary if summary is not None else ["A perfectly reasonable first point.", "Two"],
        tags=tags or ["python"],
    )


class TestExtractedContent:
    def test_length_boundary(self):
        short = validate_extracted_content(_extracted("a" * 19))
        assert not short.is_valid
        assert short.error == INSUFFICIENT_CONTENT

        assert validate_extracted_content(_extracted("a" * 20)).is_valid

    def test_unknown_author_rejected(self):
        result = validate_extracted_content(_extracted("x" * 200, author="Unknown"))
        assert not result.is_valid
        assert result.error == EXTRACTION_FAILED

    def test_named_author_accepted(self):
        assert validate_extracted_content(_extracted("x" * 200, author="unknownpleasures")).is_valid

    def test_empty_placeholder_rejected(self):
        result = validate_extracted_content(_extracted("   ", is_placeholder=True))
        assert not result.is_valid
        assert result.error == EXTRACTION_FAILED

    @pytest.mark.parametrize("content", [TWEET_PLACEHOLDER, INSTAGRAM_PLACEHOLDER])
    def test_failure_phrases_rejected(self, content: str):
        result = validate_extracted_content(_extracted(content))
        assert not result.is_valid
        assert result.error == EXTRACTION_FAILED

    def test_media_only_accepted(self):
        assert validate_extracted_content(
            _extracted("", image_url="https://i.imgur.com/a.jpg")
        ).is_valid
        assert validate_extracted_content(
            _extracted("short", video_url="https://v.example.com/a.mp4")
        ).is_valid

    def test_empty_rule_runs_before_author_rule(self):
        result = validate_extracted_content(_extracted("", author="Unknown", is_placeholder=True))
        assert result.reason == "No content could be extracted from this URL"


class TestSummarizedContent:
    def test_valid_summary(self):
        assert validate_summarized_content(_summary()).is_valid

    def test_fallback_phrase_rejected(self):
        result = validate_summarized_content(_summary(["Summary unavailable for this page."]))
        assert not result.is_valid
        assert result.error == PROCESSING_FAILED

    @pytest.mark.parametrize("tag", ["llm_failed", "processing_failed", "EXTRACTION_FAILED"])
    def test_failure_tags_rejected(self, tag: str):
        result = validate_summarized_content(_summary(tags=["python", tag]))
        assert not result.is_valid
        assert result.error == PROCESSING_FAILED

    def test_single_short_bullet_rejected(self):
        result = validate_summarized_content(_summary(["Too short."]))
        assert not result.is_valid
        assert result.error == INSUFFICIENT_CONTENT

    def test_single_long_bullet_accepted(self):
        assert validate_summarized_content(
            _summary(["One bullet that is comfortably longer than the minimum."])
        ).is_valid


def test_item_data_checks_extraction_first():
    result = validate_item_data(_extracted("tiny"), _summary(tags=["llm_failed"]))
    assert result.error == INSUFFICIENT_CONTENT

    result = validate_item_data(_extracted("x" * 50), _summary(tags=["llm_failed"]))
    assert result.error == PROCESSING_FAILED

    assert validate_item_data(_extracted("x" * 50), _summary()).is_valid
