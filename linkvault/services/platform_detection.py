"""Platform classification and display helpers for submitted URLs.

These run before any network call: ``detect_platform`` decides which resolver
the extraction façade dispatches to, ``normalize_domain`` collapses host
variants for reporting.
"""

from __future__ import annotations

import re

from linkvault.models.contracts import PlatformKind
from linkvault.utils.url_utils import extract_hostname, platform_for_host

# Leading subdomains that do not change which site a host belongs to
_VARIANT_PREFIX_RE = re.compile(r"^(?:www|m|mobile|app|vt|vm|v|old|new|i|web)\.")

_CANONICAL_HOSTS: dict[str, tuple[str, ...]] = {
    "twitter": ("twitter.com", "x.com", "t.co"),
    "reddit": ("reddit.com", "redd.it"),
    "instagram": ("instagram.com", "instagr.am"),
    "tiktok": ("tiktok.com",),
    "youtube": ("youtube.com", "youtu.be"),
    "linkedin": ("linkedin.com", "lnkd.in"),
    "facebook": ("facebook.com", "fb.com", "fb.me"),
    "github": ("github.com",),
    "medium": ("medium.com",),
    "substack": ("substack.com",),
}

_DISPLAY_NAMES = {
    "twitter": "X (Twitter)",
    "reddit": "Reddit",
    "instagram": "Instagram",
    "tiktok": "TikTok",
    "youtube": "YouTube",
    "linkedin": "LinkedIn",
    "facebook": "Facebook",
    "github": "GitHub",
    "medium": "Medium",
    "substack": "Substack",
    "generic": "Web",
    "email": "Newsletter",
}


def detect_platform(url: str) -> PlatformKind:
    """Classify ``url`` into a platform family.

    Matching is on the hostname only, case-insensitive, and never touches the
    network. Anything unparseable is ``generic``.
    """
    host = extract_hostname(url)
    if not host:
        return PlatformKind.GENERIC
    return platform_for_host(host)


def normalize_domain(domain: str | None) -> str:
    """Collapse a host (or URL) to a canonical platform name or bare domain.

    >>> normalize_domain("https://old.reddit.com/r/python")
    'reddit'
    >>> normalize_domain("www.example.com:8080")
    'example.com'
    """
    if not domain:
        return "unknown"

    normalized = domain.strip().lower()
    normalized = re.sub(r"^https?://", "", normalized)
    normalized = normalized.split("/")[0].split(":")[0]
    normalized = _VARIANT_PREFIX_RE.sub("", normalized, count=1)
    # "www.m.example.com" style doubles
    normalized = _VARIANT_PREFIX_RE.sub("", normalized, count=1)

    for canonical, hosts in _CANONICAL_HOSTS.items():
        for host in hosts:
            if normalized == host or normalized.endswith(f".{host}"):
                return canonical
    return normalized or "unknown"


def platform_label(name: str | PlatformKind) -> str:
    """Human-readable name for a platform kind or canonical domain."""
    key = str(name)
    return _DISPLAY_NAMES.get(key, key)
