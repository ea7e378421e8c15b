import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from linkvault.core.logging import get_logger
from linkvault.core.settings import Settings, get_settings
from linkvault.errors import NonRetryableError
from linkvault.utils.error_logger import log_http_error

logger = get_logger(__name__)

# Client errors: a repeat request would get the same answer
NON_RETRYABLE_STATUS_CODES: set[int] = {
    400, 401, 403, 404, 405, 406, 407, 408, 409, 410, 411, 412, 413, 414, 415, 416, 417, 418,
    421, 422, 423, 424, 425, 426, 428, 429, 431, 451,
}  # fmt: skip


def categorize_http_error(error: httpx.HTTPStatusError) -> Exception:
    """Map a status error to NonRetryableError for client errors, else keep it."""
    status_code = error.response.status_code

    if status_code in NON_RETRYABLE_STATUS_CODES:
        return NonRetryableError(f"Non-retryable HTTP {status_code}: {error}")

    if 500 <= status_code < 600:
        return error

    return NonRetryableError(f"Unknown status code {status_code}: {error}")


class HttpService:
    """Async outbound HTTP client.

    Every call gets its own timeout and is made exactly once: the fallback
    chains decide what to try next, so nothing here retries.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport
        self.headers = {
            "User-Agent": self.settings.http_user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "application/json;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }

    def _timeout(self, seconds: float | None) -> httpx.Timeout:
        total = seconds if seconds is not None else self.settings.http_timeout_seconds
        return httpx.Timeout(total, connect=min(total, self.settings.http_connect_timeout_seconds))

    @asynccontextmanager
    async def get_client(self, timeout: float | None = None) -> AsyncIterator[httpx.AsyncClient]:
        """Get an async HTTP client with the default headers."""
        async with httpx.AsyncClient(
            timeout=self._timeout(timeout),
            follow_redirects=True,
            headers=self.headers,
            transport=self.transport,
        ) as client:
            yield client

    async def fetch(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """
        Fetch a URL once.

        Args:
            url: URL to fetch
            params: Query parameters
            headers: Additional headers
            timeout: Total deadline in seconds (defaults to settings.http_timeout_seconds)

        Returns:
            httpx.Response object

        Raises:
            NonRetryableError: upstream answered with a client error
            httpx.HTTPError: transport failure or server error
        """
        async with self.get_client(timeout) as client:
            logger.debug("Fetching URL: %s", url)
            try:
                response = await client.get(url, params=params, headers=headers)
                response.raise_for_status()
                logger.debug("Fetched %s: %s", url, response.status_code)
                return response

            except httpx.HTTPStatusError as e:
                log_http_error(
                    "http_service",
                    url=url,
                    response=e.response,
                    error=e,
                    operation="http_fetch",
                    context={"status_code": e.response.status_code},
                    level=logging.WARNING,
                )
                raise categorize_http_error(e) from e

            except httpx.HTTPError as e:
                log_http_error(
                    "http_service",
                    url=url,
                    error=e,
                    operation="http_fetch",
                    context={"error_type": type(e).__name__},
                    level=logging.WARNING,
                )
                raise

    async def fetch_text(self, url: str, **kwargs: Any) -> str:
        response = await self.fetch(url, **kwargs)
        return response.text

    async def fetch_json(self, url: str, **kwargs: Any) -> Any:
        """Fetch and decode a JSON body; a non-JSON body raises ValueError."""
        response = await self.fetch(url, **kwargs)
        return response.json()

    async def resolve_redirects(self, url: str, *, timeout: float | None = None) -> str:
        """Follow redirects and return the final URL."""
        response = await self.fetch(url, timeout=timeout)
        final_url = str(response.url)
        if final_url != url:
            logger.debug("Resolved %s -> %s", url, final_url)
        return final_url


# Global instance
_http_service: HttpService | None = None


def get_http_service() -> HttpService:
    """Get the global HTTP service instance."""
    global _http_service
    if _http_service is None:
        _http_service = HttpService()
    return _http_service
