"""Collaborator contracts used by the enrichment pipeline."""

from linkvault.services.gateways.collaborators import (
    Badge,
    BadgeGateway,
    DomainClassifier,
    ExtractiveSummarizer,
    GamificationGateway,
    LoggingGamificationGateway,
    NullBadgeGateway,
    NullStreakGateway,
    SavedItemStore,
    StreakGateway,
    StreakResult,
    Summarizer,
)

__all__ = [
    "Badge",
    "BadgeGateway",
    "DomainClassifier",
    "ExtractiveSummarizer",
    "GamificationGateway",
    "LoggingGamificationGateway",
    "NullBadgeGateway",
    "NullStreakGateway",
    "SavedItemStore",
    "StreakGateway",
    "StreakResult",
    "Summarizer",
]
