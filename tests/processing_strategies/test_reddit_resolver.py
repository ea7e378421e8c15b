"""Tests for the Reddit resolver."""

import httpx
import pytest

from linkvault.models.contracts import ImageProvenance
from linkvault.models.upstream import RedditPost
from linkvault.processing_strategies.reddit_strategy import (
    REDDIT_PLACEHOLDER,
    RedditResolverStrategy,
    json_listing_path,
    select_post_image,
    subreddit_from_url,
)

POST_URL = "https://reddit.com/r/python/comments/abc123/some_title/"

LISTING = [
    {
        "kind": "Listing",
        "data": {
            "children": [
                {
                    "kind": "t3",
                    "data": {
                        "title": "Show: my project",
                        "author": "jane",
                        "subreddit": "python",
                        "selftext": "",
                        "url": "https://www.reddit.com/r/python/comments/abc123/some_title/",
                        "thumbnail": "self",
                        "preview": {
                            "images": [
                                {"source": {"url": "https://preview.redd.it/x.jpg?w=640&amp;s=abc"}}
                            ]
                        },
                    },
                }
            ]
        },
    },
    {"kind": "Listing", "data": {"children": []}},
]

LISTING_PAGE = """
<html><body>
<div class="thing">
  <p class="title"><a class="title" href="/r/python/comments/abc123/">Old school title</a></p>
  <a class="author">jane</a>
  <a class="thumbnail"><img src="//b.thumbs.redditmedia.com/t.jpg"></a>
  <div class="expando"><div class="usertext-body"><div class="md">
    <p>Body text from the old listing.</p>
  </div></div></div>
</div>
</body></html>
"""


def _old_reddit(json_response: httpx.Response, html_response: httpx.Response):
    def route(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith(".json"):
            return json_response
        return html_response

    return route


@pytest.mark.asyncio
async def test_second_mirror_serves_json_listing(http_for_hosts):
    http = http_for_hosts(
        {
            "www.reddit.com": httpx.Response(403),
            "old.reddit.com": _old_reddit(
                httpx.Response(200, json=LISTING), httpx.Response(500)
            ),
        }
    )

    result = await RedditResolverStrategy(http).resolve(POST_URL)

    assert result.title == "Show: my project"
    assert result.author == "jane"
    assert result.content == "Show: my project\n\nPosted in r/python by u/jane."
    assert result.image_url == "https://preview.redd.it/x.jpg?w=640&s=abc"
    assert result.image_provenance == ImageProvenance.PREVIEW
    assert result.source == "reddit.com"


@pytest.mark.asyncio
async def test_html_listing_when_every_mirror_refuses(http_for_hosts):
    http = http_for_hosts(
        {
            "www.reddit.com": httpx.Response(429),
            "old.reddit.com": _old_reddit(
                httpx.Response(503), httpx.Response(200, text=LISTING_PAGE)
            ),
        }
    )

    result = await RedditResolverStrategy(http).resolve(POST_URL)

    assert result.title == "Old school title"
    assert result.content == "Body text from the old listing."
    assert result.author == "jane"
    assert result.image_url == "https://b.thumbs.redditmedia.com/t.jpg"
    assert result.image_provenance == ImageProvenance.HTML_LISTING


@pytest.mark.asyncio
async def test_placeholder_after_every_source(http_for_hosts):
    blocked = "<html><head><title>Blocked</title></head><body></body></html>"
    http = http_for_hosts(
        {
            "old.reddit.com": _old_reddit(
                httpx.Response(403), httpx.Response(200, text=blocked)
            ),
        }
    )

    result = await RedditResolverStrategy(http).resolve(POST_URL)

    assert result.is_placeholder
    assert result.content == REDDIT_PLACEHOLDER
    assert result.title == "Reddit post in r/python"


class TestSelectPostImage:
    def test_direct_image_link_with_video(self):
        post = RedditPost.model_validate(
            {
                "title": "t",
                "url_overridden_by_dest": "https://i.redd.it/pic.png",
                "media": {"reddit_video": {"fallback_url": "https://v.redd.it/x/DASH_720.mp4"}},
            }
        )
        media = select_post_image(post)
        assert media.image_url == "https://i.redd.it/pic.png"
        assert media.video_url == "https://v.redd.it/x/DASH_720.mp4"
        assert media.provenance == ImageProvenance.JSON_API

    def test_imgur_page_rewritten(self):
        post = RedditPost.model_validate({"title": "t", "url": "https://imgur.com/AbC123"})
        assert select_post_image(post).image_url == "https://i.imgur.com/AbC123.jpg"

    def test_gallery_follows_gallery_order(self):
        post = RedditPost.model_validate(
            {
                "title": "t",
                "url": "https://www.reddit.com/gallery/abc123",
                "media_metadata": {
                    "m2": {"s": {"u": "https://preview.redd.it/g2.jpg"}},
                    "m1": {"s": {"u": "https://preview.redd.it/g1.jpg?a=1&amp;b=2"}},
                },
                "gallery_data": {"items": [{"media_id": "m1"}, {"media_id": "m2"}]},
            }
        )
        media = select_post_image(post)
        assert media.image_url == "https://preview.redd.it/g1.jpg?a=1&b=2"
        assert media.provenance == ImageProvenance.GALLERY

    def test_placeholder_thumbnail_ignored_for_external_link(self):
        post = RedditPost.model_validate(
            {"title": "t", "thumbnail": "self", "url": "https://example.com/article"}
        )
        media = select_post_image(post)
        assert media.image_url == "https://example.com/article"
        assert media.provenance == ImageProvenance.JSON_API

    def test_self_post_without_media(self):
        post = RedditPost.model_validate(
            {
                "title": "t",
                "thumbnail": "self",
                "url": "https://www.reddit.com/r/python/comments/abc123/t/",
            }
        )
        assert select_post_image(post).provenance == ImageProvenance.NONE


def test_listing_path_and_subreddit():
    assert json_listing_path(POST_URL) == "/r/python/comments/abc123/some_title.json"
    assert subreddit_from_url(POST_URL) == "python"
    assert subreddit_from_url("https://reddit.com/user/jane") is None
