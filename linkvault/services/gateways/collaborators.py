"""Contracts for the subsystems the enrichment pipeline talks to.

The pipeline only depends on these protocols. The local implementations below
log instead of calling out, which is what the CLI and tests use.
"""

from __future__ import annotations

import re
from typing import Any, Protocol

from pydantic import BaseModel, Field

from linkvault.core.logging import get_logger
from linkvault.models.contracts import GamificationAction, ItemCategory, ItemType
from linkvault.models.extraction import ItemEnrichment, SummarizerOutput

logger = get_logger(__name__)


class StreakResult(BaseModel):
    current_streak: int = 0
    longest_streak: int = 0
    maintained: bool = False
    broken: bool = False


class Badge(BaseModel):
    id: str
    name: str
    description: str | None = None


class GamificationGateway(Protocol):
    """Protocol for XP awards."""

    async def award(
        self,
        user_id: str,
        action: GamificationAction,
        *,
        domain_id: str | None = None,
        item_id: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Record an XP-earning action."""


class StreakGateway(Protocol):
    """Protocol for daily streak tracking."""

    async def update_streak(self, user_id: str) -> StreakResult:
        """Register activity for today."""


class BadgeGateway(Protocol):
    """Protocol for badge evaluation."""

    async def check_badges(self, user_id: str) -> list[Badge]:
        """Return badges newly earned by the user."""


class DomainClassifier(Protocol):
    """Protocol for knowledge-domain classification."""

    async def classify(self, category: str | None, tags: list[str]) -> str | None:
        """Return a domain id or None."""


class Summarizer(Protocol):
    """Protocol for the external LLM summarizer."""

    async def summarize(
        self,
        *,
        title: str,
        content: str,
        url: str,
        source: str,
        note: str | None = None,
    ) -> SummarizerOutput:
        """Summarize text content."""

    async def summarize_image(
        self,
        *,
        title: str,
        image_url: str,
        url: str,
        source: str,
        note: str | None = None,
        text_content: str | None = None,
    ) -> SummarizerOutput:
        """Summarize an image-led post."""


class SavedItemStore(Protocol):
    """Protocol for saved-item persistence."""

    def create_stub(
        self,
        *,
        user_id: str,
        url: str,
        source: str,
        origin: str,
        note: str | None = None,
    ) -> int:
        """Persist a new item and return its id."""

    def apply_enrichment(self, item_id: int, enrichment: ItemEnrichment) -> None:
        """Write all enrichment fields in one update."""

    def mark_failed(self, item_id: int, *, url: str, message: str) -> None:
        """Move the item to its terminal failure state."""


class LoggingGamificationGateway:
    """Gamification gateway that only logs awards."""

    async def award(
        self,
        user_id: str,
        action: GamificationAction,
        *,
        domain_id: str | None = None,
        item_id: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        logger.info(
            "XP award %s for user %s",
            action,
            user_id,
            extra={
                "component": "gamification",
                "operation": str(action),
                "item_id": item_id,
                "context_data": {"domain_id": domain_id, **(metadata or {})},
            },
        )


class NullStreakGateway:
    async def update_streak(self, user_id: str) -> StreakResult:
        return StreakResult()


class NullBadgeGateway:
    async def check_badges(self, user_id: str) -> list[Badge]:
        return []


_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")


class ExtractiveSummarizer:
    """Offline summarizer that picks the leading sentences of the content.

    Stands in for the LLM summarizer when running the pipeline locally.
    """

    def __init__(self, max_points: int = 3, max_chars: int = 280):
        self.max_points = max_points
        self.max_chars = max_chars

    async def summarize(
        self,
        *,
        title: str,
        content: str,
        url: str,
        source: str,
        note: str | None = None,
    ) -> SummarizerOutput:
        sentences = [s.strip() for s in _SENTENCE_RE.split(" ".join(content.split())) if s.strip()]
        points = [s[: self.max_chars] for s in sentences[: self.max_points]]
        return SummarizerOutput(
            title=title,
            summary=points,
            tags=[source.split(".")[0]] if source else [],
            type=ItemType.REFERENCE,
            category=ItemCategory.OTHER,
        )

    async def summarize_image(
        self,
        *,
        title: str,
        image_url: str,
        url: str,
        source: str,
        note: str | None = None,
        text_content: str | None = None,
    ) -> SummarizerOutput:
        return await self.summarize(
            title=title,
            content=text_content or f"Image post saved from {source}: {title}.",
            url=url,
            source=source,
            note=note,
        )
