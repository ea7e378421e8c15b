"""Tag normalization for consistent storage and matching.

>>> normalize_tag("  Machine Learning  ")
'machine learning'
>>> normalize_tag("AI/ML")
'ai ml'
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from linkvault.constants import MAX_TAG_LENGTH, MIN_TAG_LENGTH

_SPECIAL_CHARS_RE = re.compile(r"[^\w\s-]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_tag(raw_tag: str) -> str:
    """Lowercase, replace punctuation with spaces, collapse whitespace, cap the length."""
    tag = _SPECIAL_CHARS_RE.sub(" ", raw_tag.strip().lower())
    tag = _WHITESPACE_RE.sub(" ", tag).strip()
    return tag[:MAX_TAG_LENGTH]


def is_valid_tag(normalized_tag: str) -> bool:
    """A tag needs two characters and at least one letter."""
    if len(normalized_tag) < MIN_TAG_LENGTH:
        return False
    if not any(ch.isalpha() for ch in normalized_tag):
        return False
    return not normalized_tag.isdigit()


def tags_equal(first: str, second: str) -> bool:
    return normalize_tag(first) == normalize_tag(second)


def clean_tags(raw_tags: Iterable[str]) -> list[str]:
    """Normalize, drop invalid tags and de-duplicate while keeping order."""
    cleaned: list[str] = []
    seen: set[str] = set()
    for raw in raw_tags:
        if not isinstance(raw, str):
            continue
        tag = normalize_tag(raw)
        if not is_valid_tag(tag) or tag in seen:
            continue
        seen.add(tag)
        cleaned.append(tag)
    return cleaned
