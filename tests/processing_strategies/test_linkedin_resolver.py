"""Tests for the LinkedIn resolver."""

import httpx
import pytest

from linkvault.models.contracts import ImageProvenance
from linkvault.processing_strategies.linkedin_strategy import (
    LinkedInResolverStrategy,
    extract_activity_urn,
    extract_author_handle,
    is_login_wall,
)

POST_URL = "https://linkedin.com/posts/janedoe_shipping-activity-7123456789-abcd"

OG_PAGE = """
<html><head>
<meta property="og:title" content="Shipping our new release">
<meta property="og:description" content="We shipped the new sync engine after six months of work.">
<meta property="og:image" content="https://media.licdn.com/dms/image/post.jpg">
</head></html>
"""


@pytest.mark.asyncio
async def test_login_wall_from_proxy_falls_through_to_open_graph(http_for_hosts):
    http = http_for_hosts(
        {
            "api.microlink.io": httpx.Response(
                200,
                json={
                    "status": "success",
                    "data": {"title": "Sign Up | LinkedIn", "description": "Join now"},
                },
            ),
            "linkedin.com": httpx.Response(200, text=OG_PAGE),
        }
    )

    result = await LinkedInResolverStrategy(http).resolve(POST_URL)

    assert result.title == "LinkedIn post by janedoe"
    assert result.author == "janedoe"
    assert result.content == "We shipped the new sync engine after six months of work."
    assert result.image_url == "https://media.licdn.com/dms/image/post.jpg"
    assert result.image_provenance == ImageProvenance.OPEN_GRAPH
    assert "urn:li:activity:7123456789" in result.embed_html
    assert not result.is_placeholder


@pytest.mark.asyncio
async def test_placeholder_keeps_embed_markup(http_for_hosts):
    http = http_for_hosts({"api.microlink.io": httpx.Response(500)})

    result = await LinkedInResolverStrategy(http).resolve(POST_URL)

    assert result.is_placeholder
    assert result.author == "janedoe"
    assert "LinkedIn post by janedoe" in result.content
    assert "urn:li:activity:7123456789" in result.embed_html


def test_activity_urn_from_feed_and_share_urls():
    assert (
        extract_activity_urn("https://linkedin.com/feed/update/urn:li:activity:7000111/")
        == "urn:li:activity:7000111"
    )
    assert (
        extract_activity_urn("https://linkedin.com/embed/feed/update/urn:li:share:42")
        == "urn:li:activity:42"
    )
    assert extract_activity_urn("https://linkedin.com/company/acme/") is None


def test_author_handle_and_login_wall():
    assert extract_author_handle("https://linkedin.com/in/jane-doe/") == "jane-doe"
    assert extract_author_handle("https://linkedin.com/company/acme/") is None
    assert is_login_wall("LinkedIn")
    assert is_login_wall("Jane Doe", "Sign in to view more")
    assert not is_login_wall("Shipping our new release", "We shipped it")
    assert not is_login_wall(None)
