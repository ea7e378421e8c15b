"""Reddit resolver.

The public ``.json`` listing is tried on each configured mirror host in turn,
each with its own short deadline. When every mirror refuses, the legacy HTML
listing on old.reddit.com is scraped; after that only a placeholder is left.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from linkvault.core.logging import get_logger
from linkvault.models.contracts import ImageProvenance, PlatformKind
from linkvault.models.extraction import ExtractedContent, MediaResult
from linkvault.models.upstream import RedditPost
from linkvault.processing_strategies.base_strategy import MediaResolverStrategy
from linkvault.services.fallbacks import first_success_or_none
from linkvault.utils.html_text import collapse_whitespace, extract_image, parse_html, read_meta
from linkvault.utils.url_utils import extract_hostname, normalize_url

logger = get_logger(__name__)

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
PLACEHOLDER_THUMBNAILS = {"self", "default", "nsfw", "spoiler", "image", ""}
REDDIT_PLACEHOLDER = "Reddit post content could not be extracted. Please view the original post."

_SUBREDDIT_RE = re.compile(r"/r/([^/]+)", re.IGNORECASE)
_IMGUR_PAGE_RE = re.compile(r"^https?://(?:www\.|m\.)?imgur\.com/([A-Za-z0-9]+)/?$", re.IGNORECASE)
_GENERIC_PAGE_TITLES = {
    "reddit",
    "reddit - dive into anything",
    "reddit - the heart of the internet",
    "blocked",
    "whoa there, pardner!",
    "page not found",
}
_DELETED_AUTHORS = {"[deleted]", "[removed]"}


def subreddit_from_url(url: str) -> str | None:
    match = _SUBREDDIT_RE.search(urlsplit(url).path)
    return match.group(1) if match else None


def json_listing_path(url: str) -> str:
    """``/r/foo/comments/abc/title/`` -> ``/r/foo/comments/abc/title.json``."""
    path = urlsplit(url).path.rstrip("/") or "/"
    return f"{path}.json"


def _is_image_url(url: str) -> bool:
    return urlsplit(url).path.lower().endswith(IMAGE_EXTENSIONS)


def select_post_image(post: RedditPost) -> MediaResult:
    """Choose the best image for a post, in decreasing order of fidelity."""
    link = post.url_overridden_by_dest or post.url
    video_url = None
    if post.media and post.media.reddit_video:
        video_url = post.media.reddit_video.fallback_url

    def found(image_url: str | None, provenance: ImageProvenance) -> MediaResult:
        return MediaResult(image_url=image_url, video_url=video_url, provenance=provenance)

    if link and _is_image_url(link):
        return found(link, ImageProvenance.JSON_API)

    if link:
        imgur = _IMGUR_PAGE_RE.match(link)
        if imgur:
            return found(f"https://i.imgur.com/{imgur.group(1)}.jpg", ImageProvenance.JSON_API)

    if post.preview:
        for image in post.preview.images:
            if image.source and image.source.url:
                return found(image.source.url, ImageProvenance.PREVIEW)

    if post.media_metadata:
        media_ids = [item.media_id for item in post.gallery_data.items] if post.gallery_data else []
        media_ids = media_ids or list(post.media_metadata)
        for media_id in media_ids:
            entry = post.media_metadata.get(media_id)
            if entry and entry.s and (entry.s.u or entry.s.url):
                return found(entry.s.u or entry.s.url, ImageProvenance.GALLERY)

    thumbnail = post.thumbnail or ""
    if thumbnail not in PLACEHOLDER_THUMBNAILS and thumbnail.startswith("http"):
        return found(thumbnail, ImageProvenance.THUMBNAIL)

    if link and link.startswith("http") and "reddit.com" not in (extract_hostname(link) or ""):
        return found(link, ImageProvenance.JSON_API)

    return found(None, ImageProvenance.NONE)


def content_from_post(post: RedditPost, subreddit: str | None) -> str:
    body = (post.selftext or "").strip()
    if body:
        return body
    where = f" in r/{post.subreddit or subreddit}" if (post.subreddit or subreddit) else ""
    by = f" by u/{post.author}" if post.author and post.author not in _DELETED_AUTHORS else ""
    return f"{post.title}\n\nPosted{where}{by}."


def parse_listing_page(html: str) -> ExtractedContent | None:
    """Read a post from the old.reddit.com HTML page; login or generic pages yield None."""
    soup = parse_html(html)

    if soup.select_one("form#login_login-main, form.login-form"):
        return None

    title_node = soup.select_one("div.thing a.title") or soup.select_one("p.title a")
    title = collapse_whitespace(title_node.get_text()) if title_node else None
    title = title or read_meta(soup, "og:title")
    if not title or title.strip().lower() in _GENERIC_PAGE_TITLES:
        return None

    author_node = soup.select_one("div.thing a.author")
    author = collapse_whitespace(author_node.get_text()) if author_node else None
    body_node = soup.select_one("div.thing div.expando div.usertext-body div.md")
    body = collapse_whitespace(body_node.get_text(" ")) if body_node else ""

    image_url = extract_image(soup)
    if not image_url:
        thumb = soup.select_one("div.thing a.thumbnail img")
        src = thumb.get("src") if thumb else None
        if isinstance(src, str) and src:
            image_url = f"https:{src}" if src.startswith("//") else src

    return ExtractedContent(
        title=title,
        content=body or title,
        source="reddit.com",
        author=author if author not in _DELETED_AUTHORS else None,
        image_url=image_url,
        image_provenance=ImageProvenance.HTML_LISTING if image_url else ImageProvenance.NONE,
    )


class RedditResolverStrategy(MediaResolverStrategy):
    """Resolve Reddit posts from the public JSON API with HTML fallback."""

    platform = PlatformKind.REDDIT

    async def expand_short_link(self, url: str) -> str:
        host = extract_hostname(url) or ""
        if "redd.it" not in host:
            return url
        final = await first_success_or_none(
            "reddit.short_link",
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

    async def _fetch_json_listing(self, host: str, path: str) -> RedditPost | None:
        payload = await self.http.fetch_json(
            f"https://{host}{path}",
            params={"raw_json": "1"},
            headers={"Accept": "application/json"},
            timeout=self.settings.reddit_mirror_timeout_seconds,
        )
        return RedditPost.from_listing(payload)

    async def _fetch_listing_page(self, url: str) -> ExtractedContent | None:
        path = urlsplit(url).path
        html = await self.http.fetch_text(
            f"https://old.reddit.com{path}", timeout=self.settings.reddit_mirror_timeout_seconds
        )
        return parse_listing_page(html)

    def _mirror_attempt(self, host: str, path: str):
        return self.attempt(
            f"json:{host}",
            lambda: self._fetch_json_listing(host, path),
            self.settings.reddit_mirror_timeout_seconds,
        )

    async def resolve(self, url: str) -> ExtractedContent:
        url = await self.expand_short_link(url)
        source = self.source_for(url)
        subreddit = subreddit_from_url(url)
        path = json_listing_path(url)

        # A missing post and an unreachable mirror look the same here: both fall through
        post = await first_success_or_none(
            "reddit.json",
            [self._mirror_attempt(host, path) for host in self.settings.reddit_mirror_hosts],
        )
        if post is not None:
            media = select_post_image(post)
            author = post.author if post.author not in _DELETED_AUTHORS else None
            return ExtractedContent(
                title=post.title,
                content=content_from_post(post, subreddit),
                source=source,
                author=author,
                image_url=media.image_url,
                video_url=media.video_url,
                image_provenance=media.provenance,
            )

        scraped = await first_success_or_none(
            "reddit.html",
            [
                self.attempt(
                    "old_reddit_listing",
                    lambda: self._fetch_listing_page(url),
                    self.settings.reddit_mirror_timeout_seconds,
                )
            ],
        )
        if scraped is not None:
            return scraped.model_copy(update={"source": source})

        logger.warning(
            "Every Reddit source refused %s; returning placeholder",
            url,
            extra={"component": "reddit_resolver", "platform": "reddit"},
        )
        return ExtractedContent(
            title=f"Reddit post in r/{subreddit}" if subreddit else "Reddit post",
            content=REDDIT_PLACEHOLDER,
            source=source,
            is_placeholder=True,
        )
