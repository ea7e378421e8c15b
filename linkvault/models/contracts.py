"""Canonical enums shared across resolvers, the pipeline and storage."""

from __future__ import annotations

from enum import StrEnum


class PlatformKind(StrEnum):
    """Platform families the extraction façade dispatches on."""

    TWITTER = "twitter"
    INSTAGRAM = "instagram"
    LINKEDIN = "linkedin"
    TIKTOK = "tiktok"
    YOUTUBE = "youtube"
    REDDIT = "reddit"
    GENERIC = "generic"
    # Sentinel supplied by the email transport; never produced by URL classification
    EMAIL = "email"


class ItemStatus(StrEnum):
    """Lifecycle of a saved item."""

    NEW = "new"
    ENRICHED = "enriched"
    PROCESSING_FAILED = "processing_failed"


class ItemOrigin(StrEnum):
    """Submission surface that created the item."""

    URL = "url"
    EXTENSION = "extension"
    EMAIL = "email"


class ImageProvenance(StrEnum):
    """Which fallback step produced ``ExtractedContent.image_url``."""

    NONE = "none"
    EMBED_PAGE = "embed_page"
    OEMBED = "oembed"
    OPEN_GRAPH = "open_graph"
    METADATA_PROXY = "metadata_proxy"
    SYNDICATION = "syndication"
    JSON_API = "json_api"
    HTML_LISTING = "html_listing"
    PREVIEW = "preview"
    GALLERY = "gallery"
    THUMBNAIL = "thumbnail"
    EMAIL = "email"


class ItemType(StrEnum):
    LEARN = "learn"
    DO = "do"
    REFERENCE = "reference"


class ItemCategory(StrEnum):
    TECH = "tech"
    BUSINESS = "business"
    DESIGN = "design"
    PRODUCTIVITY = "productivity"
    LEARNING = "learning"
    LIFESTYLE = "lifestyle"
    ENTERTAINMENT = "entertainment"
    NEWS = "news"
    OTHER = "other"


class GamificationAction(StrEnum):
    """Actions the pipeline reports to the gamification subsystem."""

    SAVE_ITEM = "save_item"
    PROCESS_ITEM = "process_item"


class PipelineStage(StrEnum):
    """States of the enrichment state machine."""

    CREATED = "created"
    EXTRACTING = "extracting"
    SUMMARIZING = "summarizing"
    DOMAIN_CLASSIFYING = "domain_classifying"
    PERSISTED = "persisted"
    FAILED = "failed"
