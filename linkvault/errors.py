"""Exception hierarchy shared by resolvers, services and the enrichment pipeline."""

from __future__ import annotations


class LinkvaultError(Exception):
    """Base class for all linkvault errors."""


class NonRetryableError(LinkvaultError):
    """Upstream answered with a status that will not change on a repeat request."""


class AttemptFailed(LinkvaultError):
    """A single fallback attempt produced no usable data."""

    def __init__(self, attempt: str, reason: str) -> None:
        super().__init__(f"{attempt}: {reason}")
        self.attempt = attempt
        self.reason = reason


class FallbackExhausted(LinkvaultError):
    """Every attempt in a fallback chain failed."""

    def __init__(self, chain: str, failures: list[AttemptFailed]) -> None:
        summary = "; ".join(str(failure) for failure in failures) or "no attempts configured"
        super().__init__(f"All attempts failed for {chain}: {summary}")
        self.chain = chain
        self.failures = failures


class ExtractionError(LinkvaultError):
    """Every fallback for a mandatory field of a platform was exhausted."""

    def __init__(self, platform: str, message: str) -> None:
        super().__init__(f"{platform}: {message}")
        self.platform = platform


class ContentValidationError(LinkvaultError):
    """Extraction or summarization output failed content validation."""

    def __init__(self, error: str, reason: str | None = None) -> None:
        super().__init__(f"{error}: {reason}" if reason else error)
        self.error = error
        self.reason = reason
