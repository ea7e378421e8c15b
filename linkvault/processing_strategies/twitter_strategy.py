"""Tweet resolver: text from the public embed endpoint, media from independent sources."""

from __future__ import annotations

import math
import re

from linkvault.constants import TWEET_PLACEHOLDER
from linkvault.core.logging import get_logger
from linkvault.errors import ExtractionError, FallbackExhausted
from linkvault.models.contracts import ImageProvenance, PlatformKind
from linkvault.models.extraction import ExtractedContent, MediaResult
from linkvault.models.upstream import OEmbedResponse, SyndicationTweet, SyndicationVariant
from linkvault.processing_strategies.base_strategy import MediaResolverStrategy
from linkvault.services.fallbacks import first_success, first_success_or_none
from linkvault.services.metadata_sources import fetch_metadata_proxy, fetch_oembed
from linkvault.utils.html_text import html_fragment_to_text

logger = get_logger(__name__)

_TWEET_ID_RE = re.compile(r"/status(?:es)?/(\d+)")
_HANDLE_RE = re.compile(r"(?:twitter|x)\.com/([A-Za-z0-9_]{1,15})/?$", re.IGNORECASE)
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def extract_tweet_id(url: str) -> str | None:
    match = _TWEET_ID_RE.search(url)
    return match.group(1) if match else None


def handle_from_author_url(author_url: str | None) -> str | None:
    if not author_url:
        return None
    match = _HANDLE_RE.search(author_url.strip())
    return match.group(1) if match else None


def syndication_token(tweet_id: str) -> str:
    """Token the syndication CDN expects: (id / 1e15 * pi) in base 36 without zeros or dot."""
    value = int(tweet_id) / 1e15 * math.pi
    whole = int(value)
    fraction = value - whole

    digits = ""
    while whole:
        whole, rem = divmod(whole, 36)
        digits = _BASE36[rem] + digits
    digits = digits or "0"

    fraction_digits = []
    for _ in range(12):
        if not fraction:
            break
        fraction *= 36
        digit = int(fraction)
        fraction_digits.append(_BASE36[digit])
        fraction -= digit

    token = f"{digits}.{''.join(fraction_digits)}"
    return re.sub(r"(0+|\.)", "", token)


def _best_mp4(variants: list[SyndicationVariant]) -> str | None:
    mp4s = [
        v
        for v in variants
        if (v.content_type or v.type) == "video/mp4" and (v.url or v.src)
    ]
    if not mp4s:
        return None
    best = max(mp4s, key=lambda v: v.bitrate or 0)
    return best.url or best.src


def media_from_syndication(tweet: SyndicationTweet) -> MediaResult | None:
    """Pick the first photo, or a video poster plus its highest-bitrate mp4."""
    image_url: str | None = None
    video_url: str | None = None

    for photo in tweet.photos:
        if photo.url:
            image_url = photo.url
            break

    for detail in tweet.media_details:
        if detail.type == "photo" and not image_url:
            image_url = detail.media_url_https
        elif detail.type in {"video", "animated_gif"}:
            image_url = image_url or detail.media_url_https
            if detail.video_info and not video_url:
                video_url = _best_mp4(detail.video_info.variants)

    if tweet.video:
        image_url = image_url or tweet.video.poster
        video_url = video_url or _best_mp4(tweet.video.variants)

    result = MediaResult(
        image_url=image_url, video_url=video_url, provenance=ImageProvenance.SYNDICATION
    )
    return None if result.is_empty else result


class TwitterResolverStrategy(MediaResolverStrategy):
    """Resolve tweets without credentials."""

    platform = PlatformKind.TWITTER

    async def _fetch_oembed(self, url: str) -> OEmbedResponse | None:
        oembed = await fetch_oembed(
            self.http,
            self.settings.twitter_oembed_url,
            url,
            extra_params={"omit_script": "true"},
            timeout=self.settings.oembed_timeout_seconds,
        )
        if not (oembed.html or oembed.author_name):
            return None
        return oembed

    async def _fetch_syndication(self, tweet_id: str) -> MediaResult | None:
        payload = await self.http.fetch_json(
            self.settings.twitter_syndication_url,
            params={"id": tweet_id, "lang": "en", "token": syndication_token(tweet_id)},
            timeout=self.settings.oembed_timeout_seconds,
        )
        return media_from_syndication(SyndicationTweet.model_validate(payload))

    async def _fetch_proxy_media(self, url: str) -> MediaResult | None:
        data = await fetch_metadata_proxy(self.http, url)
        if data is None:
            return None
        result = MediaResult(
            image_url=data.image.url if data.image else None,
            video_url=data.video.url if data.video else None,
            provenance=ImageProvenance.METADATA_PROXY,
        )
        return None if result.is_empty else result

    @staticmethod
    async def _oembed_thumbnail(oembed: OEmbedResponse) -> MediaResult | None:
        if not oembed.thumbnail_url:
            return None
        return MediaResult(image_url=oembed.thumbnail_url, provenance=ImageProvenance.OEMBED)

    async def resolve_media(self, url: str, oembed: OEmbedResponse) -> MediaResult | None:
        attempts = []
        tweet_id = extract_tweet_id(url)
        if tweet_id:
            attempts.append(self.attempt("syndication", lambda: self._fetch_syndication(tweet_id)))
        attempts.append(
            self.attempt(
                "metadata_proxy",
                lambda: self._fetch_proxy_media(url),
                self.settings.metadata_proxy_timeout_seconds,
            )
        )
        attempts.append(self.attempt("oembed_thumbnail", lambda: self._oembed_thumbnail(oembed)))
        return await first_success_or_none("twitter.media", attempts)

    async def resolve(self, url: str) -> ExtractedContent:
        try:
            oembed = await first_success(
                "twitter.text",
                [
                    self.attempt(
                        "oembed",
                        lambda: self._fetch_oembed(url),
                        self.settings.oembed_timeout_seconds,
                    )
                ],
            )
        except FallbackExhausted as e:
            raise ExtractionError(
                "twitter",
                "the public embed endpoint returned no tweet; "
                "it may be private, deleted or from a suspended account",
            ) from e

        text = html_fragment_to_text(oembed.html or "")
        handle = handle_from_author_url(oembed.author_url)
        author = handle or oembed.author_name
        media = await self.resolve_media(url, oembed)

        logger.info(
            "Resolved tweet %s (text=%d chars, media=%s)",
            url,
            len(text),
            media.provenance if media else None,
            extra={"component": "twitter_resolver", "operation": "resolve", "platform": "twitter"},
        )

        has_media = media is not None
        return ExtractedContent(
            title=f"Tweet by @{author}" if author else "Tweet",
            content=text or ("" if has_media else TWEET_PLACEHOLDER),
            source=self.source_for(url),
            author=author,
            image_url=media.image_url if media else None,
            video_url=media.video_url if media else None,
            image_provenance=media.provenance if media else ImageProvenance.NONE,
            is_placeholder=not text and not has_media,
        )
