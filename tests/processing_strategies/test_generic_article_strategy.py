"""Tests for the generic web page resolver."""

import asyncio
import time

import httpx
import pytest

from linkvault.core.settings import Settings
from linkvault.models.contracts import ImageProvenance
from linkvault.processing_strategies.html_strategy import GenericArticleStrategy
from linkvault.services.http import HttpService

PAGE_URL = "https://example.com/blog/post"

PAGE = """
<html>
<head>
  <title>Fallback title</title>
  <meta property="og:title" content="Why we rewrote the sync engine">
  <meta property="og:description" content="A short teaser for the post.">
  <meta property="og:image" content="https://example.com/cover.png">
</head>
<body><nav>Menu</nav><article><p>Body paragraph one.</p></article></body>
</html>
"""

BARE_PAGE = "<html><head><title>Bare</title></head><body><p>Only body text.</p></body></html>"

ARTICLE_TEXT = (
    "We rewrote the sync engine over six months. "
    "This post walks through the design, the migration and what we learned along the way."
)


@pytest.fixture
def page_http(http_for_hosts):
    def _make(html: str):
        return http_for_hosts({"example.com": httpx.Response(200, text=html)})

    return _make


@pytest.mark.asyncio
async def test_readable_article_text_preferred(page_http, mocker):
    mocker.patch(
        "linkvault.processing_strategies.html_strategy.trafilatura.extract",
        return_value=ARTICLE_TEXT,
    )

    result = await GenericArticleStrategy(page_http(PAGE)).resolve(PAGE_URL)

    assert result.title == "Why we rewrote the sync engine"
    assert result.content == ARTICLE_TEXT
    assert result.image_url == "https://example.com/cover.png"
    assert result.image_provenance == ImageProvenance.OPEN_GRAPH
    assert result.source == "example.com"
    assert not result.is_placeholder


@pytest.mark.asyncio
async def test_short_article_text_uses_description(page_http, mocker):
    mocker.patch(
        "linkvault.processing_strategies.html_strategy.trafilatura.extract", return_value=None
    )

    result = await GenericArticleStrategy(page_http(PAGE)).resolve(PAGE_URL)

    assert result.content == "A short teaser for the post."


@pytest.mark.asyncio
async def test_no_description_uses_visible_body(page_http, mocker):
    mocker.patch(
        "linkvault.processing_strategies.html_strategy.trafilatura.extract", return_value="tiny"
    )

    result = await GenericArticleStrategy(page_http(BARE_PAGE)).resolve(PAGE_URL)

    assert result.title == "Bare"
    assert result.content == "Only body text."
    assert result.image_url is None
    assert result.image_provenance == ImageProvenance.NONE


@pytest.mark.asyncio
async def test_fetch_failure_yields_placeholder(http_for_hosts):
    http = http_for_hosts({"example.com": httpx.Response(500)})

    result = await GenericArticleStrategy(http).resolve(PAGE_URL)

    assert result.is_placeholder
    assert result.title == PAGE_URL
    assert result.content == ""


@pytest.mark.asyncio
async def test_parse_failure_strips_markup(page_http, mocker):
    mocker.patch(
        "linkvault.processing_strategies.html_strategy.parse_html",
        side_effect=ValueError("broken markup"),
    )

    result = await GenericArticleStrategy(page_http(BARE_PAGE)).resolve(PAGE_URL)

    assert result.title == "Bare"
    assert result.content == "Bare Only body text."
    assert result.image_url is None


@pytest.mark.asyncio
async def test_stalled_fetch_bounded_by_total_deadline():
    async def stalled(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, text=PAGE)

    settings = Settings(_env_file=None, database_url="sqlite://", http_timeout_seconds=0.2)
    http = HttpService(settings=settings, transport=httpx.MockTransport(stalled))

    started = time.monotonic()
    result = await GenericArticleStrategy(http).resolve(PAGE_URL)

    assert time.monotonic() - started < 2
    assert result.is_placeholder
    assert result.title == PAGE_URL
