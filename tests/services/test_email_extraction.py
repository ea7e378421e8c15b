"""Tests for turning forwarded emails into pre-extracted items."""

import pytest

from linkvault.errors import ContentValidationError
from linkvault.models.contracts import ItemOrigin
from linkvault.pipeline.models import EmailSubmission
from linkvault.services.email_extraction import (
    build_email_extraction,
    email_url,
    sender_domain_from_address,
)

BODY = (
    "This week in tooling: three new releases, a deep dive on packaging, "
    "and a reader question about async testing."
)


def test_build_email_extraction():
    extracted = build_email_extraction(BODY, "letters.example.com", "Weekly digest #12")

    assert extracted.title == "Weekly digest #12"
    assert extracted.content == BODY
    assert extracted.source == "letters.example.com"
    assert not extracted.has_media


def test_short_body_rejected():
    with pytest.raises(ContentValidationError) as exc_info:
        build_email_extraction("Too short to keep.", "letters.example.com", "Hi")
    assert exc_info.value.error == "Insufficient content"


def test_html_body_used_when_text_missing():
    html = f"<html><body><p>{BODY}</p><script>track()</script></body></html>"
    extracted = build_email_extraction(None, "letters.example.com", "", html=html)

    assert extracted.content == BODY
    assert extracted.title == "letters.example.com"


def test_sender_domain_helpers():
    assert sender_domain_from_address("News <hi@Letters.Example.com>") == "letters.example.com"
    assert sender_domain_from_address("hi@example.org") == "example.org"
    assert sender_domain_from_address("nobody") == "unknown"
    assert email_url("letters.example.com") == "https://letters.example.com"


def test_email_submission_builds_pre_extracted_request():
    email = EmailSubmission(text=BODY, sender_domain="letters.example.com", subject="Digest")
    request = email.to_submission("user-1", note="read later")

    assert request.url == "https://letters.example.com"
    assert request.origin == ItemOrigin.EMAIL
    assert request.pre_extracted is not None
    assert request.pre_extracted.title == "Digest"
    assert request.note == "read later"
