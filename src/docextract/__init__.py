# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""docextract: primary documentation text from rendered web pages.

Takes a rendered DOM snapshot (declarative shadow roots included) and returns
the page's main documentation text through a fixed-priority cascade of
extraction tiers, each with its own sanitization and quality gates:

- shadow-hosted documentation containers
- main elements and generic main-content selectors
- largest-element and whole-body fallbacks
"""

from __future__ import annotations

from docextract.config import Thresholds
from docextract.errors import (
    ConfigError,
    DocExtractError,
    DocumentParseError,
    InsufficientContentError,
    SelectorError,
)
from docextract.paragraphs import extract_link_titles, filter_paragraphs
from docextract.pipeline import (
    ExtractionPipeline,
    ExtractionResult,
    extract_content,
    extract_content_or_raise,
    extract_html,
)
from docextract.quality import TextQuality, classify
from docextract.sanitizer import sanitize
from docextract.shadow import find_in_shadow
from docextract.trace import ExtractionCandidate, ExtractionTrace, Tier

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DocExtractError",
    "DocumentParseError",
    "ExtractionCandidate",
    "ExtractionPipeline",
    "ExtractionResult",
    "ExtractionTrace",
    "InsufficientContentError",
    "SelectorError",
    "TextQuality",
    "Thresholds",
    "Tier",
    "classify",
    "extract_content",
    "extract_content_or_raise",
    "extract_html",
    "extract_link_titles",
    "filter_paragraphs",
    "find_in_shadow",
    "sanitize",
]
