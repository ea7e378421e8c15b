"""LinkedIn resolver.

LinkedIn puts posts behind a login wall for anonymous clients. The metadata
proxy and a direct Open Graph fetch are tried, each rejecting login-wall
pages, before falling back to what the URL itself reveals. This resolver
never authenticates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from linkvault.constants import LINKEDIN_PLACEHOLDER_SHORT, MIN_CONTENT_CHARS
from linkvault.core.logging import get_logger
from linkvault.models.contracts import ImageProvenance, PlatformKind
from linkvault.models.extraction import ExtractedContent
from linkvault.processing_strategies.base_strategy import MediaResolverStrategy
from linkvault.services.fallbacks import first_success_or_none
from linkvault.services.metadata_sources import fetch_metadata_proxy, fetch_open_graph

logger = get_logger(__name__)

LOGIN_WALL_INDICATORS = (
    "sign up",
    "sign in",
    "log in",
    "join linkedin",
    "選擇語言",
    "500 million+ members",
)

_URN_PATTERNS = (
    re.compile(r"urn:li:(?:activity|share):(\d+)"),
    re.compile(r"linkedin\.com/posts/[^/]+[-_]activity-(\d+)", re.IGNORECASE),
    re.compile(r"linkedin\.com/feed/update/[^:]+:(\d+)", re.IGNORECASE),
)
_AUTHOR_PATTERNS = (
    re.compile(r"linkedin\.com/posts/([^_/]+)", re.IGNORECASE),
    re.compile(r"linkedin\.com/in/([^/]+)", re.IGNORECASE),
)
_TITLE_AUTHOR_RE = re.compile(r"^([^|]+?)\s+(?:on\s+)?LinkedIn", re.IGNORECASE)


@dataclass(frozen=True)
class LinkedInPost:
    title: str
    content: str
    author: str | None
    image_url: str | None
    provenance: ImageProvenance


def extract_activity_urn(url: str) -> str | None:
    """Activity URN for posts, share and feed-update URLs."""
    for pattern in _URN_PATTERNS:
        match = pattern.search(url)
        if match:
            return f"urn:li:activity:{match.group(1)}"
    return None


def extract_author_handle(url: str) -> str | None:
    for pattern in _AUTHOR_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def embed_markup(urn: str) -> str:
    return (
        f'<iframe src="https://www.linkedin.com/embed/feed/update/{urn}" height="600" '
        'width="504" frameborder="0" allowfullscreen="" title="Embedded post"></iframe>'
    )


def is_login_wall(title: str | None, description: str | None = None) -> bool:
    if not title:
        return False
    title_lower = title.lower()
    description_lower = (description or "").lower()
    if title_lower == "linkedin" or title_lower.startswith("sign up"):
        return True
    return any(
        indicator in title_lower or indicator in description_lower
        for indicator in LOGIN_WALL_INDICATORS
    )


def placeholder_text(author: str | None) -> str:
    by = f" by {author}" if author else ""
    return (
        f"This is a LinkedIn post{by}. LinkedIn restricts access to post content without "
        "authentication. Click the link to view the original post."
    )


class LinkedInResolverStrategy(MediaResolverStrategy):
    """Resolve LinkedIn posts from public metadata only."""

    platform = PlatformKind.LINKEDIN

    async def _from_metadata_proxy(self, url: str, url_author: str | None) -> LinkedInPost | None:
        data = await fetch_metadata_proxy(self.http, url)
        if data is None:
            return None
        if is_login_wall(data.title, data.description):
            logger.info("Metadata proxy returned a LinkedIn login wall for %s", url)
            return None

        author = data.author or url_author
        if not author and data.title:
            match = _TITLE_AUTHOR_RE.match(data.title)
            if match:
                author = match.group(1).strip()

        title = data.title or "LinkedIn Post"
        if author and "linkedin" in title.lower():
            title = f"LinkedIn post by {author}"

        content = data.description or ""
        if len(content) < MIN_CONTENT_CHARS:
            content = LINKEDIN_PLACEHOLDER_SHORT

        image_url = data.image.url if data.image else None
        return LinkedInPost(
            title=title,
            content=content,
            author=author,
            image_url=image_url,
            provenance=ImageProvenance.METADATA_PROXY if image_url else ImageProvenance.NONE,
        )

    async def _from_open_graph(self, url: str, url_author: str | None) -> LinkedInPost | None:
        og = await fetch_open_graph(
            self.http, url, timeout=self.settings.embed_page_timeout_seconds
        )
        if og is None or is_login_wall(og.title, og.description):
            return None

        author = og.author or url_author
        title = og.title or "LinkedIn Post"
        if author and author not in title:
            title = f"LinkedIn post by {author}"

        return LinkedInPost(
            title=title,
            content=og.description or placeholder_text(author),
            author=author,
            image_url=og.image,
            provenance=ImageProvenance.OPEN_GRAPH if og.image else ImageProvenance.NONE,
        )

    async def resolve(self, url: str) -> ExtractedContent:
        urn = extract_activity_urn(url)
        url_author = extract_author_handle(url)
        embed_html = embed_markup(urn) if urn else None
        source = self.source_for(url)

        post = await first_success_or_none(
            "linkedin.post",
            [
                self.attempt(
                    "metadata_proxy",
                    lambda: self._from_metadata_proxy(url, url_author),
                    self.settings.metadata_proxy_timeout_seconds,
                ),
                self.attempt(
                    "open_graph",
                    lambda: self._from_open_graph(url, url_author),
                    self.settings.embed_page_timeout_seconds,
                ),
            ],
        )

        if post is None:
            return ExtractedContent(
                title=f"LinkedIn post by {url_author}" if url_author else "LinkedIn Post",
                content=placeholder_text(url_author),
                source=source,
                author=url_author,
                embed_html=embed_html,
                is_placeholder=True,
            )

        return ExtractedContent(
            title=post.title,
            content=post.content,
            source=source,
            author=post.author,
            image_url=post.image_url,
            embed_html=embed_html,
            image_provenance=post.provenance,
        )
