"""Tests for resolver dispatch."""

from unittest.mock import AsyncMock

import httpx
import pytest

from linkvault.models.contracts import PlatformKind
from linkvault.models.extraction import ExtractedContent
from linkvault.processing_strategies.html_strategy import GenericArticleStrategy
from linkvault.processing_strategies.registry import ContentExtractor


@pytest.fixture
def extractor(make_http):
    return ContentExtractor(make_http(lambda request: httpx.Response(404)))


def _content(source: str) -> ExtractedContent:
    return ExtractedContent(title="t", content="resolved content", source=source)


@pytest.mark.asyncio
async def test_url_canonicalized_before_dispatch(extractor, mocker):
    resolve = mocker.patch.object(
        extractor.strategies[PlatformKind.TWITTER],
        "resolve",
        new=AsyncMock(return_value=_content("twitter.com")),
    )

    result = await extractor.extract("https://x.com/acme/status/555/photo/1?s=20")

    resolve.assert_awaited_once_with("https://twitter.com/acme/status/555")
    assert result.source == "twitter.com"


@pytest.mark.asyncio
async def test_platform_override(extractor, mocker):
    reddit = mocker.patch.object(
        extractor.strategies[PlatformKind.REDDIT],
        "resolve",
        new=AsyncMock(return_value=_content("example.com")),
    )
    generic = mocker.patch.object(
        extractor.strategies[PlatformKind.GENERIC], "resolve", new=AsyncMock()
    )

    await extractor.extract("https://example.com/a?utm_source=x", PlatformKind.REDDIT)

    reddit.assert_awaited_once_with("https://example.com/a")
    generic.assert_not_awaited()


def test_unregistered_platform_uses_generic(extractor):
    assert isinstance(extractor.get_strategy(PlatformKind.EMAIL), GenericArticleStrategy)


def test_every_resolver_registered(extractor):
    assert sorted(extractor.list_strategies()) == [
        "GenericArticleStrategy",
        "InstagramResolverStrategy",
        "LinkedInResolverStrategy",
        "RedditResolverStrategy",
        "TikTokResolverStrategy",
        "TwitterResolverStrategy",
        "YouTubeResolverStrategy",
    ]


def test_register_replaces_platform(extractor, make_http):
    replacement = GenericArticleStrategy(make_http(lambda request: httpx.Response(404)))
    extractor.register(replacement)
    assert extractor.get_strategy(PlatformKind.GENERIC) is replacement
    assert len(extractor.strategies) == 7
