"""Instagram resolver.

Instagram serves almost nothing to anonymous clients, so four sources are
tried in order: the public embed page, the oEmbed endpoint, the post page's
Open Graph tags and the metadata proxy. When all of them refuse, the result
is a labeled placeholder rather than an error.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

from linkvault.constants import INSTAGRAM_PLACEHOLDER
from linkvault.core.logging import get_logger
from linkvault.models.contracts import ImageProvenance, PlatformKind
from linkvault.models.extraction import ExtractedContent
from linkvault.processing_strategies.base_strategy import MediaResolverStrategy
from linkvault.services.fallbacks import first_success_or_none
from linkvault.services.metadata_sources import (
    fetch_metadata_proxy,
    fetch_oembed,
    fetch_open_graph,
)
from linkvault.utils.html_text import collapse_whitespace, parse_html

logger = get_logger(__name__)

_POST_PATH_RE = re.compile(r"instagram\.com/(?:[^/]+/)?(p|reel|tv)/([^/?#]+)", re.IGNORECASE)
_URL_AUTHOR_RE = re.compile(r"instagram\.com/([^/]+)/(?:p|reel)/", re.IGNORECASE)
_TITLE_HANDLE_RE = re.compile(r"\(@([^)]+)\)")
_VIDEO_URL_RE = re.compile(r'"video_url"\s*:\s*"((?:[^"\\]|\\.)+)"')
_GENERIC_TITLES = {"instagram", "login • instagram", "instagram photos and videos"}


@dataclass(frozen=True)
class InstagramPost:
    caption: str | None
    author: str | None
    image_url: str | None
    video_url: str | None
    provenance: ImageProvenance

    @property
    def is_empty(self) -> bool:
        return not (self.caption or self.image_url or self.video_url)


def parse_post_path(url: str) -> tuple[str, str] | None:
    """Return ``(kind, shortcode)`` for post, reel and tv URLs."""
    match = _POST_PATH_RE.search(url)
    return (match.group(1).lower(), match.group(2)) if match else None


def author_from_url(url: str) -> str | None:
    match = _URL_AUTHOR_RE.search(url)
    if match and match.group(1).lower() not in {"p", "reel", "tv"}:
        return match.group(1)
    return None


def handle_from_title(title: str | None) -> str | None:
    """``"Jane (@jane) • Instagram photo"`` -> ``"jane"``."""
    if not title:
        return None
    match = _TITLE_HANDLE_RE.search(title)
    return match.group(1) if match else None


def parse_embed_page(html: str) -> InstagramPost | None:
    """Read media URL, handle and caption from the captioned embed page."""
    soup = parse_html(html)

    image_url = None
    image = soup.select_one("img.EmbeddedMediaImage")
    if image is not None and image.get("src"):
        image_url = image["src"]

    video_url = None
    video_match = _VIDEO_URL_RE.search(html)
    if video_match:
        video_url = json.loads(f'"{video_match.group(1)}"')

    author = None
    username = soup.select_one(".UsernameText") or soup.select_one(".Username")
    if username is not None:
        author = collapse_whitespace(username.get_text()) or None

    caption = None
    caption_node = soup.select_one(".Caption")
    if caption_node is not None:
        for noise in caption_node.select(".CaptionUsername, .CaptionComments"):
            noise.decompose()
        caption = collapse_whitespace(caption_node.get_text(" ")) or None

    post = InstagramPost(
        caption=caption,
        author=author,
        image_url=image_url,
        video_url=video_url,
        provenance=ImageProvenance.EMBED_PAGE,
    )
    return None if post.is_empty else post


class InstagramResolverStrategy(MediaResolverStrategy):
    """Resolve Instagram posts and reels without logging in."""

    platform = PlatformKind.INSTAGRAM

    async def _from_embed_page(self, url: str) -> InstagramPost | None:
        parsed = parse_post_path(url)
        if parsed is None:
            return None
        kind, shortcode = parsed
        html = await self.http.fetch_text(
            f"https://www.instagram.com/{kind}/{shortcode}/embed/captioned/",
            timeout=self.settings.embed_page_timeout_seconds,
        )
        return parse_embed_page(html)

    async def _from_oembed(self, url: str) -> InstagramPost | None:
        oembed = await fetch_oembed(self.http, self.settings.instagram_oembed_url, url)
        post = InstagramPost(
            caption=oembed.title,
            author=oembed.author_name,
            image_url=oembed.thumbnail_url,
            video_url=None,
            provenance=ImageProvenance.OEMBED,
        )
        return None if post.is_empty else post

    async def _from_open_graph(self, url: str) -> InstagramPost | None:
        og = await fetch_open_graph(
            self.http, url, timeout=self.settings.embed_page_timeout_seconds
        )
        if og is None:
            return None
        if (og.title or "").strip().lower() in _GENERIC_TITLES and not og.image:
            # Login wall
            return None
        return InstagramPost(
            caption=og.description,
            author=handle_from_title(og.title),
            image_url=og.image,
            video_url=og.video,
            provenance=ImageProvenance.OPEN_GRAPH,
        )

    async def _from_metadata_proxy(self, url: str) -> InstagramPost | None:
        data = await fetch_metadata_proxy(self.http, url)
        if data is None:
            return None
        author = (data.author or "").lstrip("@") or handle_from_title(data.title)
        post = InstagramPost(
            caption=data.description,
            author=author or None,
            image_url=data.image.url if data.image else None,
            video_url=data.video.url if data.video else None,
            provenance=ImageProvenance.METADATA_PROXY,
        )
        return None if post.is_empty else post

    async def resolve(self, url: str) -> ExtractedContent:
        post = await first_success_or_none(
            "instagram.post",
            [
                self.attempt(
                    "embed_page",
                    lambda: self._from_embed_page(url),
                    self.settings.embed_page_timeout_seconds,
                ),
                self.attempt(
                    "oembed", lambda: self._from_oembed(url), self.settings.oembed_timeout_seconds
                ),
                self.attempt(
                    "open_graph",
                    lambda: self._from_open_graph(url),
                    self.settings.embed_page_timeout_seconds,
                ),
                self.attempt(
                    "metadata_proxy",
                    lambda: self._from_metadata_proxy(url),
                    self.settings.metadata_proxy_timeout_seconds,
                ),
            ],
        )

        url_author = author_from_url(url)
        source = self.source_for(url)

        if post is None:
            logger.warning(
                "Every Instagram source refused %s; returning placeholder",
                url,
                extra={"component": "instagram_resolver", "platform": "instagram"},
            )
            return ExtractedContent(
                title=f"Instagram post by @{url_author}" if url_author else "Instagram Post",
                content=INSTAGRAM_PLACEHOLDER,
                source=source,
                author=url_author,
                is_placeholder=True,
            )

        author = post.author or url_author
        has_media = bool(post.image_url or post.video_url)
        return ExtractedContent(
            title=f"Instagram post by @{author}" if author else "Instagram Post",
            content=post.caption or ("" if has_media else INSTAGRAM_PLACEHOLDER),
            source=source,
            author=author,
            image_url=post.image_url,
            video_url=post.video_url,
            image_provenance=post.provenance if post.image_url else ImageProvenance.NONE,
            is_placeholder=not post.caption and not has_media,
        )
