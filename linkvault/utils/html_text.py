"""HTML parsing helpers shared by the resolvers and the generic extractor."""

from __future__ import annotations

import re
from html import unescape

from bs4 import BeautifulSoup

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)

NON_CONTENT_TAGS = ("script", "style", "nav", "footer", "header", "noscript")


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def truncate_text(text: str, max_chars: int) -> str:
    """Cut ``text`` to ``max_chars`` and mark the cut with an ellipsis."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."


def html_fragment_to_text(fragment: str) -> str:
    """Strip an HTML fragment to plain text, keeping paragraph and line breaks.

    Used for oEmbed blockquotes where the line structure of a post matters.
    """
    if not fragment:
        return ""
    soup = parse_html(_BREAK_RE.sub("\n", fragment))
    paragraphs = soup.find_all("p")
    if paragraphs:
        blocks = [p.get_text().strip() for p in paragraphs]
    else:
        blocks = [soup.get_text().strip()]
    lines = []
    for block in blocks:
        cleaned = "\n".join(line.strip() for line in block.splitlines() if line.strip())
        if cleaned:
            lines.append(cleaned)
    return "\n\n".join(lines)


def read_meta(soup: BeautifulSoup, *names: str) -> str | None:
    """Return the first non-empty ``<meta>`` content matching any of ``names``.

    Open Graph tags use ``property``; most others use ``name``; both are checked.
    """
    for name in names:
        for attr in ("property", "name"):
            tag = soup.find("meta", attrs={attr: name})
            if tag is None:
                continue
            content = tag.get("content")
            if isinstance(content, str) and content.strip():
                return unescape(content.strip())
    return None


def extract_title(soup: BeautifulSoup) -> str | None:
    """Page title: og:title, then twitter:title, then ``<title>``."""
    title = read_meta(soup, "og:title", "twitter:title")
    if title:
        return title
    if soup.title and soup.title.string:
        text = collapse_whitespace(soup.title.string)
        return text or None
    return None


def extract_description(soup: BeautifulSoup) -> str | None:
    return read_meta(soup, "og:description", "description", "twitter:description")


def extract_image(soup: BeautifulSoup) -> str | None:
    return read_meta(soup, "og:image", "og:image:url", "twitter:image")


def visible_body_text(soup: BeautifulSoup, max_chars: int) -> str:
    """Body text with navigation chrome removed, cut to ``max_chars``."""
    body = soup.body or soup
    for tag in body.find_all(NON_CONTENT_TAGS):
        tag.decompose()
    return collapse_whitespace(body.get_text(" "))[:max_chars]


def strip_markup(html: str) -> str:
    """Regex-only text pass for pages the DOM parser cannot handle."""
    if not html:
        return ""
    text = _SCRIPT_STYLE_RE.sub(" ", html)
    text = _TAG_RE.sub(" ", text)
    return collapse_whitespace(unescape(text))


def title_from_markup(html: str) -> str | None:
    if not html:
        return None
    match = _TITLE_RE.search(html)
    if not match:
        return None
    return collapse_whitespace(unescape(match.group(1))) or None
