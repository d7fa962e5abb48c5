"""English-leakage scrubber for Turkish summaries.

Models asked for Turkish-only output still append the odd English sentence
("The price increased…", "According to…").  ``scrub_english_leakage`` removes
them with an ordered denylist of sentence openers.  This is a heuristic, not a
language detector: English that opens with anything not listed below passes
through untouched.
"""

from __future__ import annotations

import re

_NEGATED_AUXILIARIES = [
    "isn't", "aren't", "wasn't", "weren't", "hasn't", "haven't", "hadn't",
    "won't", "wouldn't", "couldn't", "shouldn't", "can't", "cannot",
]

# Contractions first; either apostrophe style.
_AUXILIARIES = (
    "("
    + "|".join(word.replace("'", "['’]") for word in _NEGATED_AUXILIARIES)
    + "|is|are|was|were|has|have|will|would|could|should|can|may|might|had|been|being)"
)

_SENTENCE_STARTERS: list[str] = [
    "The", "This", "It", "According to", "In", "On", "At", "For", "With", "From", "By", "As",
]

_DISCOURSE_MARKERS: list[str] = [
    "However", "Additionally", "Furthermore", "Meanwhile", "Moreover",
]

# ── Ordered rules: (pattern, replacement) ─────────────────────────────

_RULES: list[tuple[re.Pattern[str], str]] = [
    # ". Bitcoin was ..." — capitalized word followed by an English auxiliary
    (re.compile(r"\. [A-Z][a-z]+ " + _AUXILIARIES + r"\b[^.]*\."), "."),
    *[(re.compile(r"\. " + re.escape(word) + r" [^.]*\."), ".") for word in _SENTENCE_STARTERS],
    *[(re.compile(r"\. " + word + r"[^.]*\."), ".") for word in _DISCOURSE_MARKERS],
    # unterminated trailing fragments
    (re.compile(r"\s+(is|are|was|were|has|have|had|been|being)\s+[a-z][^.]*$", re.I), ""),
    (re.compile(r"\s+(the|this|that|these|those|it|he|she|they)\s+[a-z][^.]*$", re.I), ""),
    # trailing standalone capitalized word
    (re.compile(r"\s+[A-Z][a-z]+\s*$"), ""),
]

_PERIOD_RUN_RE = re.compile(r"\.+")
_TRAILING_PERIOD_RE = re.compile(r"\.\s*$")


def _apply_rules(text: str) -> str:
    for pattern, replacement in _RULES:
        text = pattern.sub(replacement, text)
    text = text.strip()
    text = _PERIOD_RUN_RE.sub(".", text)
    return _TRAILING_PERIOD_RE.sub(".", text)


def scrub_english_leakage(summary: str) -> str:
    """Strip English sentences and fragments from a Turkish *summary*.

    The rules are re-applied until the text stops changing, since removing
    one sentence can expose the next.
    """
    previous = None
    text = summary
    while text != previous:
        previous = text
        text = _apply_rules(text)
    return text
