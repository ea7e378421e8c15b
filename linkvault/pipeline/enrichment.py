"""Enrichment pipeline for saved links.

A submission moves through Created -> Extracting -> Summarizing ->
DomainClassifying and ends Persisted, either enriched or failed. Every
transition is one method returning a typed stage result. The saved item is
written three times at most: the stub, then either the single enrichment
update or the terminal failure update.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from linkvault.constants import PROCESSING_FAILED_SUMMARY
from linkvault.core.logging import get_logger
from linkvault.core.settings import Settings, get_settings
from linkvault.errors import ContentValidationError
from linkvault.models.contracts import GamificationAction, ItemOrigin, PipelineStage, PlatformKind
from linkvault.models.extraction import ItemEnrichment, SummarizerOutput
from linkvault.pipeline.models import (
    ClassificationStage,
    CreatedStage,
    EmailSubmission,
    ExtractionStage,
    ProcessItemResult,
    SubmissionRequest,
    SummarizationStage,
)
from linkvault.processing_strategies.registry import ContentExtractor, get_content_extractor
from linkvault.services.content_validator import validate_extracted_content, validate_item_data
from linkvault.services.gateways import (
    Badge,
    BadgeGateway,
    DomainClassifier,
    GamificationGateway,
    LoggingGamificationGateway,
    NullBadgeGateway,
    NullStreakGateway,
    SavedItemStore,
    StreakGateway,
    Summarizer,
)
from linkvault.services.platform_detection import detect_platform
from linkvault.utils.error_logger import log_error, log_processing_error
from linkvault.utils.html_text import truncate_text
from linkvault.utils.image_urls import display_image_url, is_vision_eligible
from linkvault.utils.tags import clean_tags
from linkvault.utils.url_utils import extract_hostname, normalize_url

logger = get_logger(__name__)

T = TypeVar("T")

COMPONENT = "enrichment_pipeline"


class EnrichmentPipeline:
    """Turns a submission into an enriched saved item or a labeled failure."""

    def __init__(
        self,
        *,
        store: SavedItemStore,
        summarizer: Summarizer,
        domain_classifier: DomainClassifier,
        gamification: GamificationGateway | None = None,
        streaks: StreakGateway | None = None,
        badges: BadgeGateway | None = None,
        extractor: ContentExtractor | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.store = store
        self.summarizer = summarizer
        self.domain_classifier = domain_classifier
        self.gamification = gamification or LoggingGamificationGateway()
        self.streaks = streaks or NullStreakGateway()
        self.badges = badges or NullBadgeGateway()
        self.extractor = extractor or get_content_extractor()
        self.settings = settings or get_settings()

    async def process(self, request: SubmissionRequest) -> ProcessItemResult:
        """Run a submission through every stage.

        The stub is persisted before any network call. Extraction,
        summarization and classification failures end in the failure state on
        that same item; side-effect failures are only logged.
        """
        created = self.create_stub(request)
        await self.award_save(request, created)

        stage = PipelineStage.EXTRACTING
        try:
            extraction = await self.extract(request, created)
            stage = PipelineStage.SUMMARIZING
            summarization = await self.summarize(request, created, extraction)
            stage = PipelineStage.DOMAIN_CLASSIFYING
            classification = await self.classify_domain(summarization)
            stage = PipelineStage.PERSISTED
            self.persist(created, extraction, summarization, classification)
        except Exception as e:
            return self.fail(created, stage, e)

        new_badges = await self.run_side_effects(request, created, summarization, classification)
        logger.info(
            "Enriched item %s (%s, mode=%s, domain=%s)",
            created.item_id,
            created.url,
            summarization.mode,
            classification.domain_id or "none",
            extra={"component": COMPONENT, "operation": "process", "item_id": created.item_id},
        )
        return ProcessItemResult(
            item_id=created.item_id,
            success=True,
            stage=PipelineStage.PERSISTED,
            new_badges=new_badges,
        )

    async def process_email(
        self, email: EmailSubmission, user_id: str, note: str | None = None
    ) -> ProcessItemResult:
        """Process a forwarded email; bodies too short to save raise before any item exists."""
        return await self.process(email.to_submission(user_id, note=note))

    def create_stub(self, request: SubmissionRequest) -> CreatedStage:
        if request.pre_extracted is not None:
            url = request.url
            source = request.pre_extracted.source
        else:
            url = normalize_url(request.url)
            source = extract_hostname(url) or "unknown"

        if request.origin == ItemOrigin.EMAIL:
            platform = PlatformKind.EMAIL
        else:
            platform = detect_platform(url)

        item_id = self.store.create_stub(
            user_id=request.user_id,
            url=url,
            source=source,
            origin=request.origin.value,
            note=request.note,
        )
        return CreatedStage(item_id=item_id, url=url, source=source, platform=platform)

    async def award_save(self, request: SubmissionRequest, created: CreatedStage) -> None:
        await self._isolated(
            "award_save_xp",
            created.item_id,
            lambda: self.gamification.award(
                request.user_id,
                GamificationAction.SAVE_ITEM,
                item_id=created.item_id,
                metadata={"url": created.url, "source": created.source},
            ),
        )

    async def extract(self, request: SubmissionRequest, created: CreatedStage) -> ExtractionStage:
        if request.pre_extracted is not None:
            logger.info("Using pre-extracted content for item %s", created.item_id)
            extracted = request.pre_extracted
        else:
            extracted = await self.extractor.extract(created.url, created.platform)

        validation = validate_extracted_content(extracted)
        if not validation.is_valid:
            raise ContentValidationError(validation.error or "Invalid content", validation.reason)

        image_url = display_image_url(extracted.image_url, extracted.source)
        if image_url != extracted.image_url:
            extracted = extracted.model_copy(update={"image_url": image_url})

        return ExtractionStage(
            extracted=extracted,
            truncated_content=truncate_text(
                extracted.content, self.settings.max_summary_input_chars
            ),
        )

    async def summarize(
        self,
        request: SubmissionRequest,
        created: CreatedStage,
        extraction: ExtractionStage,
    ) -> SummarizationStage:
        extracted = extraction.extracted
        text = extraction.truncated_content
        summary: SummarizerOutput | None = None
        mode = "text"

        short_text = len(text) < self.settings.min_text_for_text_summary
        if short_text and is_vision_eligible(extracted.image_url):
            try:
                summary = await self.summarizer.summarize_image(
                    title=extracted.title,
                    image_url=extracted.image_url,
                    url=created.url,
                    source=extracted.source,
                    note=request.note,
                    text_content=text,
                )
                mode = "image"
            except Exception as e:
                log_error(
                    COMPONENT,
                    e,
                    operation="summarize_image",
                    item_id=created.item_id,
                    context={"image_url": extracted.image_url},
                    level=logging.WARNING,
                )

        if summary is None:
            summary = await self.summarizer.summarize(
                title=extracted.title,
                content=text,
                url=created.url,
                source=extracted.source,
                note=request.note,
            )

        validation = validate_item_data(extracted, summary)
        if not validation.is_valid:
            raise ContentValidationError(validation.error or "Invalid summary", validation.reason)

        # Reddit post titles are kept verbatim
        if "reddit" in extracted.source.lower():
            summary = summary.model_copy(update={"title": extracted.title})

        return SummarizationStage(
            summary=summary,
            mode=mode,
            image_url=extracted.image_url if mode == "image" else None,
        )

    async def classify_domain(self, summarization: SummarizationStage) -> ClassificationStage:
        summary = summarization.summary
        tags = clean_tags(summary.tags)
        domain_id = await self.domain_classifier.classify(summary.category.value, tags)
        return ClassificationStage(domain_id=domain_id, tags=tags)

    def persist(
        self,
        created: CreatedStage,
        extraction: ExtractionStage,
        summarization: SummarizationStage,
        classification: ClassificationStage,
    ) -> None:
        extracted = extraction.extracted
        summary = summarization.summary
        self.store.apply_enrichment(
            created.item_id,
            ItemEnrichment(
                title=summary.title,
                summary="\n".join(summary.summary),
                tags=classification.tags,
                type=summary.type,
                category=summary.category,
                raw_content=extraction.truncated_content,
                source=extracted.source,
                image_url=extracted.image_url,
                domain_id=classification.domain_id,
                author=extracted.author,
                embed_html=extracted.embed_html,
            ),
        )

    async def run_side_effects(
        self,
        request: SubmissionRequest,
        created: CreatedStage,
        summarization: SummarizationStage,
        classification: ClassificationStage,
    ) -> list[Badge]:
        summary = summarization.summary
        await self._isolated(
            "award_process_xp",
            created.item_id,
            lambda: self.gamification.award(
                request.user_id,
                GamificationAction.PROCESS_ITEM,
                domain_id=classification.domain_id,
                item_id=created.item_id,
                metadata={
                    "category": summary.category.value,
                    "tags": classification.tags,
                    "type": summary.type.value,
                },
            ),
        )
        await self._isolated(
            "update_streak", created.item_id, lambda: self.streaks.update_streak(request.user_id)
        )
        badges = await self._isolated(
            "check_badges", created.item_id, lambda: self.badges.check_badges(request.user_id)
        )
        return badges or []

    def fail(
        self, created: CreatedStage, stage: PipelineStage, error: Exception
    ) -> ProcessItemResult:
        """Write the terminal failure state; the item is kept, never deleted."""
        log_processing_error(
            COMPONENT,
            created.item_id,
            error,
            operation=stage.value,
            context={"url": created.url, "platform": created.platform.value},
        )
        try:
            self.store.mark_failed(
                created.item_id, url=created.url, message=PROCESSING_FAILED_SUMMARY
            )
        except Exception as e:
            log_processing_error(COMPONENT, created.item_id, e, operation="mark_failed")
        return ProcessItemResult(
            item_id=created.item_id,
            success=False,
            error=str(error),
            stage=PipelineStage.FAILED,
        )

    async def _isolated(
        self, operation: str, item_id: int, call: Callable[[], Awaitable[T]]
    ) -> T | None:
        """Await a side effect; its failure is logged and never reaches the caller."""
        try:
            return await call()
        except Exception as e:
            log_error(COMPONENT, e, operation=operation, item_id=item_id, level=logging.WARNING)
            return None
