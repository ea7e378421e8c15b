"""
Structured Error Logging - Simple functions for error logging with full context.

Errors are routed through the standard logging tree, so the JSONL error
handler configured in linkvault/core/logging.py writes them to logs/errors/.

Usage:
    from linkvault.utils.error_logger import log_error, log_http_error

    log_error("pipeline", error, operation="summarize", context={"key": "value"})
    log_processing_error("pipeline", item_id=123, error=e, operation="extract")
    log_http_error("http_service", url="https://...", error=e, response=resp)
"""

import logging
from typing import Any

from linkvault.core.logging import get_logger


def _extract_http_details(response: Any) -> dict[str, Any]:
    """Extract status, headers and a body excerpt from an httpx response."""
    details: dict[str, Any] = {}

    status_code = getattr(response, "status_code", None)
    if status_code is not None:
        details["status_code"] = status_code
    headers = getattr(response, "headers", None)
    if headers is not None:
        details["headers"] = {
            k: v[:200] if isinstance(v, str) else v for k, v in dict(headers).items()
        }
    if getattr(response, "url", None) is not None:
        details["url"] = str(response.url)

    try:
        details["response_body"] = response.text[:1000]
    except (AttributeError, UnicodeDecodeError, RuntimeError) as e:
        # Streaming responses raise until read
        details["extraction_error"] = f"Failed to read response body: {e}"

    return details


def log_error(
    component: str,
    error: Exception,
    *,
    operation: str | None = None,
    context: dict[str, Any] | None = None,
    http_response: Any | None = None,
    item_id: str | int | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log error with full context to both console and JSONL.

    Args:
        component: Component name for identifying the source of errors.
        error: The exception that occurred.
        operation: Name of the operation that failed.
        context: Additional context data.
        http_response: HTTP response object (if applicable).
        item_id: ID of the item being processed (if applicable).
        level: Log level; swallowed side-effect failures use WARNING.
    """
    logger = get_logger(f"error.{component}")

    http_details = _extract_http_details(http_response) if http_response is not None else None

    operation_str = f" during {operation}" if operation else ""
    item_str = f" (item: {item_id})" if item_id else ""
    message = f"{component} error{operation_str}{item_str}: {error}"

    logger.log(
        level,
        message,
        exc_info=error,
        extra={
            "component": component,
            "operation": operation,
            "context_data": context,
            "http_details": http_details,
            "item_id": item_id,
            "error_type": type(error).__name__,
            "error_message": str(error),
        },
    )


def log_processing_error(
    component: str,
    item_id: str | int,
    error: Exception,
    *,
    operation: str | None = None,
    context: dict[str, Any] | None = None,
) -> None:
    """Log processing errors with item context."""
    log_error(
        component,
        error,
        operation=operation or "content_processing",
        context=context,
        item_id=item_id,
    )


def log_http_error(
    component: str,
    url: str,
    *,
    response: Any | None = None,
    error: Exception | None = None,
    operation: str | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log HTTP-specific errors with response details.

    Args:
        component: Component name for identifying the source of errors.
        url: The URL that was requested.
        response: HTTP response object (if available).
        error: The exception that occurred (if any).
        operation: Name of the operation that failed.
        context: Additional context data.
        level: Log level; fallback attempts that advance the chain use WARNING.
    """
    full_context = {"url": url}
    if context:
        full_context.update(context)

    if not error:
        status_code = getattr(response, "status_code", "unknown")
        error = Exception(f"HTTP error for {url} (status: {status_code})")

    log_error(
        component,
        error,
        operation=operation or "http_request",
        context=full_context,
        http_response=response,
        level=level,
    )
