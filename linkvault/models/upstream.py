"""Optional-field decode models for third-party JSON payloads.

Every upstream shape is decoded through one of these models; a
``pydantic.ValidationError`` means the fallback yielded nothing.
"""

from __future__ import annotations

from html import unescape
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Upstream(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class OEmbedResponse(_Upstream):
    """Subset of the oEmbed 1.0 response used by resolvers."""

    title: str | None = None
    author_name: str | None = None
    author_url: str | None = None
    thumbnail_url: str | None = None
    html: str | None = None
    provider_name: str | None = None


class MicrolinkAsset(_Upstream):
    url: str | None = None


class MicrolinkData(_Upstream):
    title: str | None = None
    description: str | None = None
    author: str | None = None
    publisher: str | None = None
    image: MicrolinkAsset | None = None
    video: MicrolinkAsset | None = None


class MicrolinkResponse(_Upstream):
    """Response of the generic metadata-extraction proxy."""

    status: str
    data: MicrolinkData | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success" and self.data is not None


class SyndicationVariant(_Upstream):
    content_type: str | None = None
    url: str | None = None
    bitrate: int | None = None
    # The `video` block uses type/src instead of content_type/url
    type: str | None = None
    src: str | None = None


class SyndicationVideoInfo(_Upstream):
    variants: list[SyndicationVariant] = Field(default_factory=list)


class SyndicationMediaDetail(_Upstream):
    type: str | None = None
    media_url_https: str | None = None
    video_info: SyndicationVideoInfo | None = None


class SyndicationPhoto(_Upstream):
    url: str | None = None


class SyndicationVideo(_Upstream):
    poster: str | None = None
    variants: list[SyndicationVariant] = Field(default_factory=list)


class SyndicationTweet(_Upstream):
    """Tweet payload returned by the syndication CDN endpoint."""

    text: str | None = None
    photos: list[SyndicationPhoto] = Field(default_factory=list)
    media_details: list[SyndicationMediaDetail] = Field(
        default_factory=list, alias="mediaDetails"
    )
    video: SyndicationVideo | None = None


class RedditImageSource(_Upstream):
    url: str | None = None
    u: str | None = None

    @field_validator("url", "u")
    @classmethod
    def unescape_amp(cls, value: str | None) -> str | None:
        return unescape(value) if value else value


class RedditPreviewImage(_Upstream):
    source: RedditImageSource | None = None


class RedditPreview(_Upstream):
    images: list[RedditPreviewImage] = Field(default_factory=list)


class RedditMediaMetadata(_Upstream):
    status: str | None = None
    s: RedditImageSource | None = None


class RedditGalleryItem(_Upstream):
    media_id: str


class RedditGalleryData(_Upstream):
    items: list[RedditGalleryItem] = Field(default_factory=list)


class RedditVideo(_Upstream):
    fallback_url: str | None = None


class RedditMedia(_Upstream):
    reddit_video: RedditVideo | None = None


class RedditPost(_Upstream):
    """The ``data`` object of the first child of a post listing."""

    title: str
    author: str | None = None
    subreddit: str | None = None
    selftext: str | None = None
    url: str | None = None
    url_overridden_by_dest: str | None = None
    thumbnail: str | None = None
    preview: RedditPreview | None = None
    media_metadata: dict[str, RedditMediaMetadata] | None = None
    gallery_data: RedditGalleryData | None = None
    media: RedditMedia | None = None
    is_video: bool = False

    @classmethod
    def from_listing(cls, payload: Any) -> RedditPost:
        """Decode ``[post_listing, comments_listing]`` (or a bare listing) into a post."""
        listing = payload[0] if isinstance(payload, list) else payload
        children = listing["data"]["children"]
        return cls.model_validate(children[0]["data"])
