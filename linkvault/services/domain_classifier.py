"""Map a summarizer category and tags onto one of the knowledge domains.

Tags are scored against per-domain keyword lists; the best-scoring domain
wins and the category mapping is the fallback. Domain names are turned into
row ids through an injected ``DomainCache``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from linkvault.core.logging import get_logger

logger = get_logger(__name__)

CATEGORY_TO_DOMAIN: dict[str, str] = {
    "tech": "technology",
    "productivity": "productivity",
    "design": "creativity",
    "business": "finance",
    "lifestyle": "health",
    "learning": "philosophy",
    "entertainment": "creativity",
    "news": "philosophy",
    "other": "",
}

TAG_DOMAIN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "finance": (
        "investing", "investment", "stocks", "crypto", "bitcoin", "money", "budgeting",
        "wealth", "financial", "economy", "economics", "trading", "portfolio", "assets",
        "savings", "retirement", "401k", "ira",
    ),
    "career": (
        "career", "job", "interview", "resume", "linkedin", "networking", "salary",
        "promotion", "workplace", "professional", "hiring", "management", "leadership",
        "mentor", "skill",
    ),
    "health": (
        "health", "fitness", "workout", "exercise", "gym", "nutrition", "diet",
        "mental health", "meditation", "sleep", "wellness", "yoga", "running", "weight",
        "muscle",
    ),
    "philosophy": (
        "philosophy", "wisdom", "mindset", "stoic", "thinking", "ethics", "life", "meaning",
        "happiness", "psychology", "cognitive", "bias", "decision",
    ),
    "relationships": (
        "relationship", "dating", "marriage", "family", "social", "communication",
        "friendship", "love", "parenting", "children",
    ),
    "productivity": (
        "productivity", "habit", "routine", "time management", "focus", "efficiency",
        "workflow", "automation", "tools", "notion", "obsidian", "todoist", "calendar",
    ),
    "creativity": (
        "design", "art", "creative", "writing", "music", "photography", "video", "animation",
        "illustration", "ux", "ui", "figma", "adobe", "photoshop",
    ),
    "technology": (
        "programming", "coding", "software", "ai", "machine learning", "web", "app",
        "developer", "javascript", "python", "react", "api", "database", "cloud", "startup",
        "tech",
    ),
}  # fmt: skip

# Ties go to the earlier domain
DOMAIN_ORDER = (
    "technology",
    "finance",
    "productivity",
    "creativity",
    "health",
    "career",
    "philosophy",
    "relationships",
)


class DomainCache:
    """Lazily loaded domain name -> id map.

    ``loader`` is called on first lookup and again after ``invalidate()``.
    """

    def __init__(self, loader: Callable[[], Mapping[str, str]]):
        self._loader = loader
        self._ids: dict[str, str] | None = None

    def get_id(self, name: str) -> str | None:
        if not name:
            return None
        if self._ids is None:
            self._ids = dict(self._loader())
            logger.debug("Loaded %d domains", len(self._ids))
        return self._ids.get(name)

    def invalidate(self) -> None:
        self._ids = None


def score_tag(tag: str, keyword: str) -> int:
    """3 for an exact match, 2 when the keyword is a leading or trailing word, 1 inside."""
    if tag == keyword:
        return 3
    if tag.startswith(keyword + " ") or tag.endswith(" " + keyword):
        return 2
    if f" {keyword} " in tag:
        return 1
    return 0


def best_domain_for_tags(tags: Iterable[str]) -> str | None:
    normalized = [tag.lower().strip() for tag in tags if tag]
    best_domain: str | None = None
    best_score = 0
    for domain in DOMAIN_ORDER:
        score = sum(
            score_tag(tag, keyword)
            for keyword in TAG_DOMAIN_KEYWORDS[domain]
            for tag in normalized
        )
        if score > best_score:
            best_domain, best_score = domain, score
    return best_domain


class KeywordDomainClassifier:
    """Domain classifier backed by keyword scoring and a ``DomainCache``."""

    def __init__(self, cache: DomainCache):
        self.cache = cache

    async def classify(self, category: str | None, tags: list[str]) -> str | None:
        domain = best_domain_for_tags(tags)
        if domain:
            domain_id = self.cache.get_id(domain)
            if domain_id:
                return domain_id

        if category:
            fallback = CATEGORY_TO_DOMAIN.get(category.lower(), "")
            if fallback:
                return self.cache.get_id(fallback)
        return None
