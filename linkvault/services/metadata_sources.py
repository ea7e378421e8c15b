"""Clients for third-party metadata sources shared by several resolvers.

Each helper performs one request and returns a decoded model, or ``None`` when
the source answered but had nothing usable. Transport and decode errors
propagate so the fallback combinator can record them.
"""

from __future__ import annotations

from dataclasses import dataclass

from linkvault.core.logging import get_logger
from linkvault.models.upstream import MicrolinkData, MicrolinkResponse, OEmbedResponse
from linkvault.services.http import HttpService
from linkvault.utils.html_text import (
    extract_description,
    extract_image,
    extract_title,
    parse_html,
    read_meta,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class OpenGraphData:
    """Open Graph and standard meta tags read from a page."""

    title: str | None
    description: str | None
    image: str | None
    video: str | None
    author: str | None

    @property
    def is_empty(self) -> bool:
        return not (self.title or self.description or self.image or self.video)


async def fetch_metadata_proxy(
    http: HttpService, url: str, *, timeout: float | None = None
) -> MicrolinkData | None:
    """Ask the metadata-extraction proxy (Microlink) to describe ``url``."""
    payload = await http.fetch_json(
        http.settings.metadata_proxy_url,
        params={"url": url},
        headers={"Accept": "application/json"},
        timeout=timeout or http.settings.metadata_proxy_timeout_seconds,
    )
    response = MicrolinkResponse.model_validate(payload)
    if not response.succeeded:
        logger.debug("Metadata proxy returned status=%s for %s", response.status, url)
        return None
    return response.data


async def fetch_oembed(
    http: HttpService,
    endpoint: str,
    url: str,
    *,
    extra_params: dict[str, str] | None = None,
    timeout: float | None = None,
) -> OEmbedResponse:
    """Query an oEmbed endpoint for ``url``."""
    params = {"url": url}
    if extra_params:
        params.update(extra_params)
    payload = await http.fetch_json(
        endpoint,
        params=params,
        headers={"Accept": "application/json"},
        timeout=timeout or http.settings.oembed_timeout_seconds,
    )
    return OEmbedResponse.model_validate(payload)


def parse_open_graph(html: str) -> OpenGraphData:
    soup = parse_html(html)
    return OpenGraphData(
        title=extract_title(soup),
        description=extract_description(soup),
        image=extract_image(soup),
        video=read_meta(soup, "og:video:secure_url", "og:video:url", "og:video"),
        author=read_meta(soup, "author", "article:author"),
    )


async def fetch_open_graph(
    http: HttpService, url: str, *, timeout: float | None = None
) -> OpenGraphData | None:
    """Fetch a page directly and read its Open Graph tags."""
    html = await http.fetch_text(url, timeout=timeout)
    data = parse_open_graph(html)
    return None if data.is_empty else data
