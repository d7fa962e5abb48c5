"""HTML & noise sanitizer for raw news text.

Strips markup, links, tracking parameters and feed boilerplate so only plain
prose reaches the model.  Results shorter than ``MIN_CONTENT_LENGTH`` collapse
to ``""``, which callers treat as "nothing usable".
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup

logger = logging.getLogger("ceviri.engine.sanitizer")

MIN_CONTENT_LENGTH = 10

# ── Noise patterns ────────────────────────────────────────────────────

_URL_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"https?://\S+"),
    re.compile(r"www\.\S+"),
    re.compile(r"t\.co/\S+"),
]

_TRACKING_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"source=(twitter|web|facebook|instagram|reddit|telegram)\S*", re.I),
    re.compile(r"utm_[a-z_]+=[^\s&]*", re.I),
    re.compile(r"ref=[^\s&]*", re.I),
    re.compile(r"\?[a-z_]+=\w+(&[a-z_]+=\w+)*", re.I),
]

_BOILERPLATE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"RSVP:", re.I),
    re.compile(r"Read more:", re.I),
    re.compile(r"Click here:", re.I),
    re.compile(r"\[\.\.\.\]"),
    re.compile(r"\[…\]"),
    re.compile(r"\[‚Ä¶\]"),  # UTF-8 ellipsis mis-decoded as Mac Roman
]

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")

# "&lang=en" in a query string must not be read as the "&lang" entity.
_QUERY_AMPERSAND_RE = re.compile(r"&(?=[a-z_]+=)", re.I)

_BLOCK_TAGS: list[str] = [
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6", "header",
    "hr", "li", "main", "nav", "ol", "p", "pre", "section", "table", "td", "th", "tr", "ul",
]


def _first_segment(text: str) -> str:
    """Keep only what precedes the first ``|`` (unless that part is empty)."""
    return text.split("|", 1)[0] or text


def _remove(patterns: list[re.Pattern[str]], text: str) -> str:
    for pat in patterns:
        text = pat.sub("", text)
    return text


def _extract_text(html: str) -> str:
    soup = BeautifulSoup(_QUERY_AMPERSAND_RE.sub("&amp;", html), "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    # Separate block elements only; inline markup ("Bit<b>coin</b>") stays glued.
    for tag in soup(_BLOCK_TAGS):
        tag.insert_before(" ")
        tag.insert_after(" ")
    text = soup.body.get_text() if soup.body is not None else ""
    return text.strip() or soup.get_text()


def _degraded_sanitize(html: str) -> str:
    text = _TAG_RE.sub(" ", html)
    text = _first_segment(text)
    text = _URL_PATTERNS[0].sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def sanitize(html: str) -> str:
    """Return plain prose extracted from *html*, or ``""`` if too little is left.

    Never raises: when the markup parser fails, a regex-only pass is used
    instead and its (possibly short) result is returned as-is.
    """
    if not html:
        return ""

    try:
        text = _extract_text(html)
        text = _first_segment(text)
        text = _remove(_URL_PATTERNS, text)
        text = _remove(_TRACKING_PATTERNS, text)
        text = _remove(_BOILERPLATE_PATTERNS, text)
        text = _WHITESPACE_RE.sub(" ", text).strip()
    except Exception:
        logger.warning("Markup parsing failed; falling back to regex cleanup.", exc_info=True)
        return _degraded_sanitize(html)

    if len(text) < MIN_CONTENT_LENGTH:
        return ""
    return text
