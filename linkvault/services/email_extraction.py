"""Turn a forwarded newsletter into a pre-extracted item."""

from __future__ import annotations

import re

from linkvault.core.settings import get_settings
from linkvault.errors import ContentValidationError
from linkvault.models.contracts import ImageProvenance
from linkvault.models.extraction import ExtractedContent
from linkvault.utils.html_text import strip_markup

_SENDER_DOMAIN_RE = re.compile(r"@([^>\s]+)>?\s*$")


def sender_domain_from_address(address: str) -> str:
    """``"News <hi@letters.example.com>"`` -> ``"letters.example.com"``."""
    match = _SENDER_DOMAIN_RE.search(address or "")
    return match.group(1).lower() if match else "unknown"


def email_url(sender_domain: str) -> str:
    return f"https://{sender_domain}"


def build_email_extraction(
    text: str | None,
    sender_domain: str,
    subject: str,
    *,
    html: str | None = None,
) -> ExtractedContent:
    """Build the extraction for an email body, preferring plain text over HTML.

    Raises:
        ContentValidationError: the body is too short to be worth saving
    """
    body = (text or "").strip()
    if not body and html:
        body = strip_markup(html)

    min_chars = get_settings().min_email_body_chars
    if len(body) < min_chars:
        raise ContentValidationError(
            "Insufficient content",
            f"Email body has {len(body)} characters, at least {min_chars} are required",
        )

    return ExtractedContent(
        title=subject.strip() or sender_domain,
        content=body,
        source=sender_domain,
        image_provenance=ImageProvenance.NONE,
    )
