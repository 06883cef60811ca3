# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""Text quality scoring: code-likeness and cookie-banner-likeness.

Pure functions over plain strings. Three signals drive every tier decision:

- code_ratio: share of structural punctuation ``{ } ( ) ; =``
- cookie_ratio: cookie/consent keyword hits per whitespace-separated word
- js_pattern_count: how many distinct JavaScript tokens appear at all

Callers must score post-sanitization text; scoring raw markup text would
count script bodies that the sanitizer is about to remove.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

CODE_CHARS = frozenset("{}();=")

COOKIE_KEYWORDS: tuple[str, ...] = ("cookie", "consent", "accept all", "do not accept")

JS_PATTERNS: tuple[str, ...] = (
    "function",
    "=>",
    "document.querySelector",
    "addEventListener",
    "fetch(",
    "const ",
    "let ",
    "var ",
)

# Tokens that disqualify a single paragraph. "const "/"let "/"var " alone do not
# ("outlet " contains "let ").
FRAGMENT_JS_TOKENS: tuple[str, ...] = (
    "function",
    "=>",
    "document.querySelector",
    "addEventListener",
    "fetch(",
)

_COOKIE_RE = re.compile("|".join(re.escape(k) for k in COOKIE_KEYWORDS), re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class TextQuality:
    """Scores for one text blob."""

    length: int
    word_count: int
    code_ratio: float
    cookie_ratio: float
    cookie_keyword_count: int  # distinct keywords present
    js_pattern_count: int


def code_ratio(text: str) -> float:
    if not text:
        return 0.0
    return sum(1 for ch in text if ch in CODE_CHARS) / len(text)


def word_count(text: str) -> int:
    return len(text.split())


def cookie_ratio(text: str) -> float:
    """Cookie keyword occurrences per word (denominator floored at 1)."""
    return len(_COOKIE_RE.findall(text)) / max(1, word_count(text))


def cookie_keyword_count(text: str) -> int:
    lowered = text.lower()
    return sum(1 for keyword in COOKIE_KEYWORDS if keyword in lowered)


def js_pattern_count(text: str) -> int:
    return sum(1 for pattern in JS_PATTERNS if pattern in text)


def classify(text: str) -> TextQuality:
    """Score a text blob. Deterministic; never raises."""
    return TextQuality(
        length=len(text),
        word_count=word_count(text),
        code_ratio=code_ratio(text),
        cookie_ratio=cookie_ratio(text),
        cookie_keyword_count=cookie_keyword_count(text),
        js_pattern_count=js_pattern_count(text),
    )


def is_code_like(quality: TextQuality, *, threshold: int = 2, min_length: int = 0) -> bool:
    """Too many JS tokens for prose: route to paragraph salvage instead of accepting."""
    return quality.js_pattern_count > threshold and quality.length > min_length


def is_cookie_dominated(quality: TextQuality, *, max_ratio: float, min_length: int) -> bool:
    """Short text with a high cookie ratio. Long text survives moderate contamination."""
    return quality.cookie_ratio > max_ratio and quality.length < min_length


def looks_like_code(fragment: str, extra_tokens: tuple[str, ...] = ()) -> bool:
    """Fragment-level check used when salvaging paragraphs."""
    if any(token in fragment for token in FRAGMENT_JS_TOKENS):
        return True
    if "const " in fragment and "= document" in fragment:
        return True
    return any(token in fragment for token in extra_tokens)
