"""TikTok resolver: oEmbed first, metadata proxy for whatever oEmbed left out."""

from __future__ import annotations

import re

from linkvault.core.logging import get_logger
from linkvault.errors import ExtractionError
from linkvault.models.contracts import ImageProvenance, PlatformKind
from linkvault.models.extraction import ExtractedContent, MediaResult
from linkvault.models.upstream import MicrolinkData, OEmbedResponse
from linkvault.processing_strategies.base_strategy import MediaResolverStrategy
from linkvault.services.fallbacks import first_success_or_none
from linkvault.services.metadata_sources import fetch_metadata_proxy, fetch_oembed
from linkvault.utils.url_utils import TIKTOK_SHORT_LINK_PREFIXES, extract_hostname, normalize_url

logger = get_logger(__name__)

_HANDLE_RE = re.compile(r"tiktok\.com/@([^/?#]+)", re.IGNORECASE)


def handle_from_url(url: str | None) -> str | None:
    if not url:
        return None
    match = _HANDLE_RE.search(url)
    return match.group(1) if match else None


def is_short_link(url: str) -> bool:
    host = extract_hostname(url) or ""
    return host.startswith(TIKTOK_SHORT_LINK_PREFIXES)


class TikTokResolverStrategy(MediaResolverStrategy):
    """Resolve TikTok videos via public oEmbed."""

    platform = PlatformKind.TIKTOK

    async def expand_short_link(self, url: str) -> str:
        if not is_short_link(url):
            return url
        final = await first_success_or_none(
            "tiktok.short_link",
            [
                self.attempt(
                    "redirect",
                    lambda: self.http.resolve_redirects(
                        url, timeout=self.settings.short_link_timeout_seconds
                    ),
                    self.settings.short_link_timeout_seconds,
                )
            ],
        )
        return normalize_url(final) if final else url

    async def _fetch_oembed(self, url: str) -> OEmbedResponse | None:
        oembed = await fetch_oembed(self.http, self.settings.tiktok_oembed_url, url)
        if not (oembed.title or oembed.author_name or oembed.thumbnail_url):
            return None
        return oembed

    async def resolve(self, url: str) -> ExtractedContent:
        url = await self.expand_short_link(url)
        source = self.source_for(url)

        oembed = await first_success_or_none(
            "tiktok.oembed",
            [
                self.attempt(
                    "oembed", lambda: self._fetch_oembed(url), self.settings.oembed_timeout_seconds
                )
            ],
        )

        proxy: MicrolinkData | None = None
        proxy_tried = False

        async def load_proxy() -> MicrolinkData | None:
            # One proxy request per resolve, shared by the caption and image chains
            nonlocal proxy, proxy_tried
            if not proxy_tried:
                proxy_tried = True
                proxy = await fetch_metadata_proxy(self.http, url)
            return proxy

        caption = oembed.title if oembed else None
        author = None
        if oembed:
            author = handle_from_url(oembed.author_url) or oembed.author_name
        author = author or handle_from_url(url)

        if not caption or not author:
            data = await first_success_or_none(
                "tiktok.metadata",
                [
                    self.attempt(
                        "metadata_proxy", load_proxy, self.settings.metadata_proxy_timeout_seconds
                    )
                ],
            )
            if data is not None:
                caption = caption or data.description or data.title
                author = author or (data.author or "").lstrip("@") or None

        async def oembed_thumbnail() -> MediaResult | None:
            if oembed is None or not oembed.thumbnail_url:
                return None
            return MediaResult(image_url=oembed.thumbnail_url, provenance=ImageProvenance.OEMBED)

        async def proxy_image() -> MediaResult | None:
            data = await load_proxy()
            if data is None or not data.image or not data.image.url:
                return None
            return MediaResult(image_url=data.image.url, provenance=ImageProvenance.METADATA_PROXY)

        media = await first_success_or_none(
            "tiktok.image",
            [
                self.attempt("oembed_thumbnail", oembed_thumbnail),
                self.attempt(
                    "metadata_proxy", proxy_image, self.settings.metadata_proxy_timeout_seconds
                ),
            ],
        )

        embed_html = oembed.html if oembed else None
        if not caption and media is None and not embed_html:
            raise ExtractionError(
                "tiktok",
                "neither oEmbed nor the metadata proxy described this video; "
                "it may be private or removed",
            )

        return ExtractedContent(
            title=f"TikTok by @{author}" if author else "TikTok video",
            content=caption or "",
            source=source,
            author=author,
            image_url=media.image_url if media else None,
            embed_html=embed_html,
            image_provenance=media.provenance if media else ImageProvenance.NONE,
        )
