"""URL canonicalization helpers.

``normalize_url`` rewrites the URL variants each platform hands out (share
links, photo viewers, mobile hosts, tracking parameters) to one canonical form
so API-style endpoints receive the shape they expect and duplicate saves line
up. Canonicalization is an optimization: any parse failure returns the input.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from urllib.parse import SplitResult, parse_qsl, urlencode, urlsplit, urlunsplit

from linkvault.models.contracts import PlatformKind

GENERIC_TRACKING_PARAMS = frozenset({"fbclid", "gclid", "msclkid", "ref", "source"})
REDDIT_DROPPED_PARAMS = frozenset({"context", "share_id"})
LINKEDIN_DROPPED_PARAMS = frozenset({"trk", "trackingId"})
YOUTUBE_KEPT_PARAMS = ("v", "t")
TIKTOK_SHORT_LINK_PREFIXES = ("vm.", "vt.")

_TWEET_PATH_RE = re.compile(r"^(/[^/]+/status/\d+)")
_INSTAGRAM_PATH_RE = re.compile(r"^/(p|reel|tv)/([^/]+)")
_TIKTOK_PATH_RE = re.compile(r"^(/@[^/]+/video/\d+)")

# Substring rules per platform; the families share no substrings so order is irrelevant
_PLATFORM_HOST_RULES: dict[PlatformKind, Callable[[str], bool]] = {
    PlatformKind.TWITTER: lambda host: (
        "twitter.com" in host or host == "x.com" or host.endswith(".x.com")
    ),
    PlatformKind.INSTAGRAM: lambda host: "instagram.com" in host or "instagr.am" in host,
    PlatformKind.LINKEDIN: lambda host: "linkedin.com" in host or "lnkd.in" in host,
    PlatformKind.TIKTOK: lambda host: "tiktok.com" in host,
    PlatformKind.YOUTUBE: lambda host: "youtube.com" in host or "youtu.be" in host,
    PlatformKind.REDDIT: lambda host: "reddit.com" in host or "redd.it" in host,
}


def is_http_url(value: str | None) -> bool:
    """Return True when value is a valid http(s) URL."""
    if not value or not isinstance(value, str):
        return False
    try:
        parsed = urlsplit(value.strip())
    except ValueError:
        return False
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def extract_hostname(url: str) -> str | None:
    """Lower-cased hostname of ``url`` or None when it cannot be parsed."""
    if not isinstance(url, str):
        return None
    try:
        return urlsplit(url.strip()).hostname or None
    except ValueError:
        return None


def platform_for_host(host: str) -> PlatformKind:
    """Map a hostname to its platform family; unknown hosts are generic."""
    host = host.lower()
    for platform, matches in _PLATFORM_HOST_RULES.items():
        if matches(host):
            return platform
    return PlatformKind.GENERIC


def _strip_prefix(host: str, prefixes: Iterable[str]) -> str:
    for prefix in prefixes:
        if host.startswith(prefix):
            return host[len(prefix) :]
    return host


def _with_host(parts: SplitResult, host: str) -> SplitResult:
    netloc = host if parts.port is None else f"{host}:{parts.port}"
    return parts._replace(netloc=netloc)


def _filter_query(query: str, drop: Callable[[str], bool]) -> str:
    """Drop matching parameters; the query string is left untouched when nothing matches."""
    pairs = parse_qsl(query, keep_blank_values=True)
    kept = [(key, value) for key, value in pairs if not drop(key)]
    if len(kept) == len(pairs):
        return query
    return urlencode(kept)


def _normalize_twitter(parts: SplitResult) -> SplitResult:
    host = parts.hostname or ""
    if host == "x.com" or host.endswith(".x.com"):
        host = host[: -len("x.com")] + "twitter.com"
    match = _TWEET_PATH_RE.match(parts.path)
    path = match.group(1) if match else parts.path
    return _with_host(parts, host)._replace(path=path, query="", fragment="")


def _normalize_instagram(parts: SplitResult) -> SplitResult:
    match = _INSTAGRAM_PATH_RE.match(parts.path)
    path = f"/{match.group(1)}/{match.group(2)}/" if match else parts.path
    return _with_host(parts, "instagram.com")._replace(path=path, query="", fragment="")


def _normalize_reddit(parts: SplitResult) -> SplitResult:
    host = parts.hostname or ""
    if host in {"www.reddit.com", "old.reddit.com", "new.reddit.com"}:
        host = "reddit.com"
    query = _filter_query(
        parts.query, lambda key: key in REDDIT_DROPPED_PARAMS or key.startswith("utm_")
    )
    return _with_host(parts, host)._replace(query=query, fragment="")


def _normalize_youtube(parts: SplitResult) -> SplitResult:
    host = parts.hostname or ""
    path = parts.path
    params = dict(parse_qsl(parts.query, keep_blank_values=True))

    video_id: str | None = None
    if "youtu.be" in host:
        video_id = path.strip("/").split("/")[0] or None
    elif path.startswith("/shorts/"):
        video_id = path[len("/shorts/") :].strip("/").split("/")[0] or None

    if video_id:
        host = "youtube.com"
        path = "/watch"
        params["v"] = video_id
    else:
        host = _strip_prefix(host, ("www.", "m."))

    query = parts.query
    if params.get("v"):
        query = urlencode([(key, params[key]) for key in YOUTUBE_KEPT_PARAMS if params.get(key)])
    return _with_host(parts, host)._replace(path=path, query=query, fragment="")


def _normalize_tiktok(parts: SplitResult) -> SplitResult:
    host = parts.hostname or ""
    if not host.startswith(TIKTOK_SHORT_LINK_PREFIXES):
        host = "tiktok.com"
    match = _TIKTOK_PATH_RE.match(parts.path)
    path = match.group(1) if match else parts.path
    return _with_host(parts, host)._replace(path=path, query="", fragment="")


def _normalize_linkedin(parts: SplitResult) -> SplitResult:
    host = _strip_prefix(parts.hostname or "", ("www.",))
    query = _filter_query(
        parts.query, lambda key: key in LINKEDIN_DROPPED_PARAMS or key.startswith("utm_")
    )
    return _with_host(parts, host)._replace(query=query, fragment="")


def _normalize_generic(parts: SplitResult) -> SplitResult:
    host = _strip_prefix(parts.hostname or "", ("www.",))
    query = _filter_query(
        parts.query, lambda key: key in GENERIC_TRACKING_PARAMS or key.startswith("utm_")
    )
    return _with_host(parts, host)._replace(query=query, fragment="")


_NORMALIZERS: dict[PlatformKind, Callable[[SplitResult], SplitResult]] = {
    PlatformKind.TWITTER: _normalize_twitter,
    PlatformKind.INSTAGRAM: _normalize_instagram,
    PlatformKind.REDDIT: _normalize_reddit,
    PlatformKind.YOUTUBE: _normalize_youtube,
    PlatformKind.TIKTOK: _normalize_tiktok,
    PlatformKind.LINKEDIN: _normalize_linkedin,
    PlatformKind.GENERIC: _normalize_generic,
}


def normalize_url(url: str) -> str:
    """Return the canonical form of ``url``; unparseable input is returned unchanged.

    Examples:
        >>> normalize_url("https://x.com/acme/status/555/photo/1")
        'https://twitter.com/acme/status/555'
        >>> normalize_url("https://youtu.be/dQw4w9WgXcQ?si=x")
        'https://youtube.com/watch?v=dQw4w9WgXcQ'
    """
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
        if not parts.scheme or not host:
            return url
        parts = _with_host(parts, host)
        normalizer = _NORMALIZERS[platform_for_host(host)]
        return urlunsplit(normalizer(parts))
    except (ValueError, AttributeError, TypeError):
        return url
