"""
This module defines the fallback resolver for ordinary web pages.
"""

from __future__ import annotations

import asyncio

import httpx
import trafilatura

from linkvault.core.logging import get_logger
from linkvault.errors import NonRetryableError
from linkvault.models.contracts import ImageProvenance, PlatformKind
from linkvault.models.extraction import ExtractedContent
from linkvault.processing_strategies.base_strategy import MediaResolverStrategy
from linkvault.utils.html_text import (
    extract_description,
    extract_image,
    extract_title,
    parse_html,
    strip_markup,
    title_from_markup,
    visible_body_text,
)

logger = get_logger(__name__)


class GenericArticleStrategy(MediaResolverStrategy):
    """
    Resolver for any URL no platform resolver claims.

    Readable article text comes from trafilatura. Short or missing article
    text falls back to the page description, then to the visible body text.
    """

    platform = PlatformKind.GENERIC

    async def download_content(self, url: str) -> str | None:
        """Fetch the page HTML once within the total deadline; any failure yields None."""
        try:
            async with asyncio.timeout(self.settings.http_timeout_seconds):
                return await self.http.fetch_text(
                    url, timeout=self.settings.http_timeout_seconds
                )
        except (TimeoutError, httpx.HTTPError, NonRetryableError) as e:
            logger.warning(
                "GenericArticleStrategy: fetch failed for %s: %s",
                url,
                e,
                extra={"component": "generic_resolver", "operation": "download_content"},
            )
            return None

    def extract_article_text(self, html: str) -> str:
        text = trafilatura.extract(html, include_comments=False, include_tables=False) or ""
        return text.strip()

    def extract_data(self, html: str, url: str) -> ExtractedContent:
        """Build the result from fetched markup."""
        source = self.source_for(url)
        try:
            soup = parse_html(html)
            title = extract_title(soup) or url
            image_url = extract_image(soup)
            content = self.extract_article_text(html)
            if len(content) < self.settings.min_article_chars:
                logger.debug(
                    "GenericArticleStrategy: article text too short for %s (%d chars)",
                    url,
                    len(content),
                )
                content = extract_description(soup) or visible_body_text(
                    soup, self.settings.generic_body_max_chars
                )
        except Exception as e:
            logger.warning("GenericArticleStrategy: DOM parsing failed for %s: %s", url, e)
            title = title_from_markup(html) or url
            image_url = None
            content = strip_markup(html)[: self.settings.generic_body_max_chars]

        return ExtractedContent(
            title=title,
            content=content,
            source=source,
            image_url=image_url,
            image_provenance=ImageProvenance.OPEN_GRAPH if image_url else ImageProvenance.NONE,
            is_placeholder=not content.strip() and not image_url,
        )

    async def resolve(self, url: str) -> ExtractedContent:
        html = await self.download_content(url)
        if not html:
            return ExtractedContent(
                title=url,
                content="",
                source=self.source_for(url),
                is_placeholder=True,
            )
        result = self.extract_data(html, url)
        logger.info(
            "GenericArticleStrategy: extracted %d chars from %s",
            len(result.content),
            url,
        )
        return result
