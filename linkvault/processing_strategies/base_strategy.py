"""
This module defines the abstract base class for platform media resolvers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from linkvault.core.settings import Settings
from linkvault.models.contracts import PlatformKind
from linkvault.models.extraction import ExtractedContent
from linkvault.services.fallbacks import Attempt
from linkvault.services.http import HttpService, get_http_service
from linkvault.services.platform_detection import detect_platform
from linkvault.utils.url_utils import extract_hostname


class MediaResolverStrategy(ABC):
    """
    Abstract base class for platform resolvers.

    A resolver turns one URL into an ``ExtractedContent``. It degrades to
    partial data or a labeled placeholder when a platform refuses access and
    raises ``ExtractionError`` only when a mandatory field could not be
    obtained from any source.
    """

    platform: PlatformKind

    def __init__(self, http: HttpService | None = None, settings: Settings | None = None):
        """
        Args:
            http: Outbound HTTP service; the global one by default.
            settings: Settings used for endpoints and per-attempt deadlines.
        """
        self.http = http or get_http_service()
        self.settings = settings or self.http.settings

    def can_handle_url(self, url: str) -> bool:
        return detect_platform(url) == self.platform

    @staticmethod
    def source_for(url: str) -> str:
        """Hostname recorded as the item's source."""
        return extract_hostname(url) or "unknown"

    def attempt(self, name, call, timeout: float | None = None) -> Attempt:
        """Build a chain step named ``<platform>.<name>``."""
        return Attempt(
            name=f"{self.platform}.{name}",
            call=call,
            timeout=timeout if timeout is not None else self.settings.http_timeout_seconds,
        )

    @abstractmethod
    async def resolve(self, url: str) -> ExtractedContent:
        """
        Resolve title, text, author and media for ``url``.

        Args:
            url: Canonical URL of the post or page.

        Returns:
            The best content the platform would give up.

        Raises:
            ExtractionError: every source for a mandatory field failed.
        """
