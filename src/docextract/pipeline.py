# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""Cascading content-extraction pipeline.

Flow:
  rendered DOM root
    → survey (document stats into the trace)
    → content location (shadow-hosted container, light-DOM fallback)
    → tiers, in priority order, until one accepts:
        1. shadow           shadow-hosted documentation container
        2. main             primary main element, aggressive sanitize
        3. main-selectors   keep-longest scan over generic main selectors
        4. largest-element  first element with enough non-cookie text
        5. body             aggressive whole-body clone
        6. body-light       structural-junk-only body clone
        7. raw-body         unsanitized body text
    → ExtractionResult | None

Each tier sanitizes its own clone; the input tree is never mutated.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

import lxml.html

from docextract import dom
from docextract.config import Thresholds
from docextract.errors import InsufficientContentError, SelectorError
from docextract.paragraphs import (
    BODY_PROFILE,
    MAIN_PROFILE,
    ParagraphProfile,
    append_link_titles,
    extract_link_titles,
    filter_paragraphs,
)
from docextract.quality import TextQuality, classify, is_code_like, is_cookie_dominated
from docextract.sanitizer import (
    AGGRESSIVE_GROUPS,
    BODY_SWEEP,
    CHROME_GROUP,
    COOKIE_CHROME_GROUP,
    DIALOG_GROUP,
    MAIN_SWEEP,
    MARKUP_GROUP,
    SCRIPT_GROUP,
    STRUCTURAL_GROUP,
    strip,
)
from docextract.shadow import find_first_in_shadow
from docextract.trace import ExtractionCandidate, ExtractionTrace, Tier

logger = logging.getLogger(__name__)

# Custom elements that host documentation inside their shadow trees
SHADOW_HOST_SELECTORS: tuple[str, ...] = ("doc-xml-content",)

CONTENT_CONTAINER_SELECTORS: tuple[str, ...] = (
    'div.container[data-name="content"]',
    '.container[data-name="content"]',
    '[data-name="content"]',
)

BODY_CONTENT_SELECTORS: tuple[str, ...] = (".body.conbody", ".conbody", ".body")

_CONTAINER_TEXT_BLOCKS = "p, div, span, li, h1, h2, h3, h4, h5, h6"

MAIN_ELEMENT_SELECTORS: tuple[str, ...] = ('[role="main"]', "main")

MAIN_SELECTORS: tuple[str, ...] = (
    "main",
    '[role="main"]',
    "article",
    ".main-content",
    "#main",
    '[id*="content"]',
    '[class*="content"]',
)


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Accepted content plus the trace of the call that produced it."""

    content: str
    tier: Tier
    trace: ExtractionTrace

    @property
    def debug(self) -> dict:
        return self.trace.as_dict()

    def as_dict(self) -> dict:
        return {"content": self.content, "debug": self.debug}


@dataclass(slots=True)
class _Page:
    """Per-call working state shared by the tiers."""

    root: lxml.html.HtmlElement
    body: lxml.html.HtmlElement
    trace: ExtractionTrace
    container: lxml.html.HtmlElement | None = None
    body_content: lxml.html.HtmlElement | None = None


def _longer(best: ExtractionCandidate | None, candidate: ExtractionCandidate) -> ExtractionCandidate:
    """Fold step for keep-longest; first seen wins strict ties."""
    if best is None or candidate.length > best.length:
        return candidate
    return best


class ExtractionPipeline:
    """Fixed-priority tier cascade over one rendered DOM snapshot.

    Stateless between calls: the only per-call state is the trace and the
    located containers, both created inside extract().
    """

    def __init__(self, thresholds: Thresholds | None = None) -> None:
        self.thresholds = thresholds or Thresholds()
        t = self.thresholds
        self._main_profile = dataclasses.replace(
            MAIN_PROFILE,
            min_fragment_length=t.main_paragraph_min_length,
            accept_length=t.main_min_length,
        )
        self._body_profile = dataclasses.replace(
            BODY_PROFILE,
            min_fragment_length=t.body_paragraph_min_length,
            accept_length=t.body_min_length,
        )
        self._tiers: tuple[tuple[Tier, Callable[[_Page], ExtractionCandidate | None]], ...] = (
            (Tier.SHADOW, self._shadow_tier),
            (Tier.MAIN, self._main_tier),
            (Tier.MAIN_SELECTORS, self._main_selectors_tier),
            (Tier.LARGEST_ELEMENT, self._largest_element_tier),
            (Tier.BODY, self._body_tier),
            (Tier.BODY_LIGHT, self._body_light_tier),
            (Tier.RAW_BODY, self._raw_body_tier),
        )

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def extract(
        self,
        root: lxml.html.HtmlElement,
        trace: ExtractionTrace | None = None,
    ) -> ExtractionResult | None:
        """Run the tiers in order and return the first accepted candidate.

        Args:
            root: Rendered document root (or any element). Not mutated.
            trace: Optional trace to fill; a fresh one is created otherwise.

        Returns:
            ExtractionResult, or None when no tier produced acceptable content.
        """
        trace = trace if trace is not None else ExtractionTrace()
        page = _Page(root=root, body=dom.body_of(root), trace=trace)
        self._survey(page)
        self._locate_content(page)

        for tier, attempt in self._tiers:
            candidate = attempt(page)
            if candidate is None:
                logger.debug("Tier %s rejected: %s", tier.label, trace.rejections.get(tier.label, "n/a"))
                continue
            trace.record_success(tier)
            logger.info("Extracted %d chars via tier %d (%s)", candidate.length, tier, tier.label)
            return ExtractionResult(content=candidate.text, tier=tier, trace=trace)

        logger.info("No tier produced acceptable content (body text %d chars)", trace.body_text_length)
        return None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _first_match(
        self,
        root: lxml.html.HtmlElement,
        selectors: Iterable[str],
        trace: ExtractionTrace,
    ) -> lxml.html.HtmlElement | None:
        for selector in selectors:
            try:
                match = dom.query_one(root, selector)
            except SelectorError as e:
                trace.selector_errors += 1
                logger.debug("Selector skipped: %s", e)
                continue
            if match is not None:
                return match
        return None

    def _count(self, root: lxml.html.HtmlElement, selector: str) -> int:
        return len(dom.query_all(root, selector))

    def _accept(self, page: _Page, tier: Tier, text: str) -> ExtractionCandidate:
        page.trace.record_candidate(tier, len(text))
        return ExtractionCandidate(text=text, tier=tier)

    def _reject(self, page: _Page, tier: Tier, reason: str, length: int | None = None) -> None:
        if length is not None:
            page.trace.record_candidate(tier, length)
        page.trace.record_rejection(tier, reason)
        return None

    def _text_with_titles(self, node: lxml.html.HtmlElement) -> str:
        titles = extract_link_titles(node, self.thresholds.link_title_min_length)
        return append_link_titles(dom.text_content(node).strip(), titles)

    def _salvage(
        self,
        page: _Page,
        container: lxml.html.HtmlElement,
        text: str,
        profile: ParagraphProfile,
    ) -> str | None:
        salvaged = filter_paragraphs(
            container,
            text,
            profile,
            js_threshold=self.thresholds.js_pattern_threshold,
            link_title_min_length=self.thresholds.link_title_min_length,
        )
        if salvaged is not None:
            page.trace.paragraph_salvage_used = True
        return salvaged

    def _last_resort_reason(self, quality: TextQuality) -> str | None:
        t = self.thresholds
        if quality.length <= t.last_resort_min_length:
            return "too short"
        if quality.code_ratio >= t.max_code_ratio:
            return f"code ratio {quality.code_ratio:.2f}"
        if is_cookie_dominated(
            quality,
            max_ratio=t.last_resort_max_cookie_ratio,
            min_length=t.last_resort_cookie_reject_length,
        ):
            return f"cookie ratio {quality.cookie_ratio:.2f}"
        return None

    # ------------------------------------------------------------------
    # Survey and content location
    # ------------------------------------------------------------------

    def _survey(self, page: _Page) -> None:
        trace = page.trace
        trace.body_text_length = len(dom.text_content(page.body).strip())
        trace.div_count = self._count(page.root, "div")
        trace.paragraph_count = self._count(page.root, "p")

    def _locate_content(self, page: _Page) -> None:
        """Find the documentation container, preferring shadow-hosted ones."""
        t = self.thresholds
        trace = page.trace
        container = None

        hosts = []
        for selector in SHADOW_HOST_SELECTORS:
            try:
                hosts.extend(dom.query_all(page.root, selector))
            except SelectorError as e:
                trace.selector_errors += 1
                logger.debug("Shadow host selector skipped: %s", e)
        trace.shadow_host_found = bool(hosts)
        trace.shadow_root_found = any(dom.shadow_root(host) is not None for host in hosts)

        if hosts:
            trace.shadow_search_attempted = True
            for host in hosts:
                container = find_first_in_shadow(host, CONTENT_CONTAINER_SELECTORS, t.shadow_max_depth)
                if container is not None:
                    break
            trace.shadow_search_result = container is not None

        body_content = None
        if container is not None:
            body_content = self._first_match(container, BODY_CONTENT_SELECTORS, trace)
            if body_content is None and self._first_match(container, (_CONTAINER_TEXT_BLOCKS,), trace) is not None:
                if len(dom.text_content(container).strip()) > t.shadow_container_min_length:
                    body_content = container
        else:
            container = self._first_match(page.root, CONTENT_CONTAINER_SELECTORS, trace)
            if container is not None:
                body_content = self._first_match(container, BODY_CONTENT_SELECTORS, trace)

        page.container = container
        page.body_content = body_content

        trace.content_container_found = container is not None
        if container is not None:
            trace.content_container_classes = dom.class_name(container)
            trace.content_container_text_length = len(dom.text_content(container).strip())
        trace.body_content_found = body_content is not None
        if body_content is not None:
            trace.body_content_classes = dom.class_name(body_content)
            trace.body_content_text_length = len(dom.text_content(body_content).strip())

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------

    def _shadow_tier(self, page: _Page) -> ExtractionCandidate | None:
        target = page.body_content if page.body_content is not None else page.container
        if target is None:
            return self._reject(page, Tier.SHADOW, "no content container")

        cleaned = strip(target, (SCRIPT_GROUP, COOKIE_CHROME_GROUP))
        text = self._text_with_titles(cleaned)
        if len(text) <= self.thresholds.shadow_min_length:
            return self._reject(page, Tier.SHADOW, "too short", len(text))

        page.trace.shadow_content_length = len(text)
        return self._accept(page, Tier.SHADOW, text)

    def _main_tier(self, page: _Page) -> ExtractionCandidate | None:
        t = self.thresholds
        trace = page.trace
        main = page.body_content
        if main is None:
            main = page.container
        if main is None:
            main = self._first_match(page.root, MAIN_ELEMENT_SELECTORS, trace)

        trace.main_element_found = main is not None
        if main is None:
            return self._reject(page, Tier.MAIN, "no main element")
        trace.main_element_tag = dom.tag_name(main)
        trace.main_element_classes = dom.class_name(main)

        cleaned = strip(main, AGGRESSIVE_GROUPS, sweep=MAIN_SWEEP)
        text = self._text_with_titles(cleaned)
        trace.main_text_length = len(text)
        trace.main_text_preview = text[: t.preview_length]

        quality = classify(text)
        if is_code_like(quality, threshold=t.js_pattern_threshold, min_length=t.main_min_length):
            salvaged = self._salvage(page, cleaned, text, self._main_profile)
            if salvaged is None:
                return self._reject(page, Tier.MAIN, "code-like, nothing salvaged", len(text))
            return self._accept(page, Tier.MAIN, salvaged)

        if quality.length <= t.main_min_length:
            return self._reject(page, Tier.MAIN, "too short", quality.length)
        if quality.code_ratio >= t.max_code_ratio:
            return self._reject(page, Tier.MAIN, f"code ratio {quality.code_ratio:.2f}", quality.length)
        if is_cookie_dominated(quality, max_ratio=t.main_max_cookie_ratio, min_length=t.main_cookie_reject_length):
            return self._reject(page, Tier.MAIN, f"cookie ratio {quality.cookie_ratio:.2f}", quality.length)
        return self._accept(page, Tier.MAIN, text)

    def _main_selectors_tier(self, page: _Page) -> ExtractionCandidate | None:
        t = self.thresholds
        # Selectors match against a chrome-stripped clone of the body
        cleaned_body = strip(page.body, (MARKUP_GROUP, CHROME_GROUP, DIALOG_GROUP))
        passing: list[ExtractionCandidate] = []
        for selector in MAIN_SELECTORS:
            match = self._first_match(cleaned_body, (selector,), page.trace)
            if match is None:
                continue
            page.trace.selector_matches += 1
            text = dom.text_content(match).strip()
            if len(text) <= t.selector_min_length:
                continue
            # No long-text escape hatch here, unlike the body tier
            if classify(text).cookie_ratio >= t.selector_max_cookie_ratio:
                continue
            passing.append(ExtractionCandidate(text=text, tier=Tier.MAIN_SELECTORS))

        best = functools.reduce(_longer, passing, None)
        if best is None:
            return self._reject(page, Tier.MAIN_SELECTORS, f"no passing match ({page.trace.selector_matches} matched)")
        return self._accept(page, Tier.MAIN_SELECTORS, best.text)

    def _largest_element_tier(self, page: _Page) -> ExtractionCandidate | None:
        t = self.thresholds
        elements = [page.body, *dom.iter_light_elements(page.body)]
        for el in elements:
            raw = dom.text_content(el).strip()
            if len(raw) <= t.fallback_min_length:
                continue
            quality = classify(raw)
            if (
                quality.cookie_keyword_count >= t.fallback_max_cookie_keywords
                and quality.length <= t.fallback_cookie_escape_length
            ):
                continue
            text = dom.text_content(strip(el, (MARKUP_GROUP, COOKIE_CHROME_GROUP))).strip()
            if len(text) > t.fallback_min_length:
                return self._accept(page, Tier.LARGEST_ELEMENT, text)
        return self._reject(page, Tier.LARGEST_ELEMENT, "no element with enough clean text")

    def _body_tier(self, page: _Page) -> ExtractionCandidate | None:
        t = self.thresholds
        cleaned = strip(page.body, AGGRESSIVE_GROUPS, sweep=BODY_SWEEP)
        text = dom.text_content(cleaned).strip()
        quality = classify(text)

        if is_code_like(quality, threshold=t.js_pattern_threshold):
            salvaged = self._salvage(page, cleaned, text, self._body_profile)
            if salvaged is not None:
                return self._accept(page, Tier.BODY, salvaged)

        if quality.length <= t.body_min_length:
            return self._reject(page, Tier.BODY, "too short", quality.length)
        if quality.cookie_ratio >= t.body_max_cookie_ratio and quality.length <= t.body_cookie_escape_length:
            return self._reject(page, Tier.BODY, f"cookie ratio {quality.cookie_ratio:.2f}", quality.length)
        return self._accept(page, Tier.BODY, text)

    def _body_light_tier(self, page: _Page) -> ExtractionCandidate | None:
        text = dom.text_content(strip(page.body, (STRUCTURAL_GROUP,))).strip()
        reason = self._last_resort_reason(classify(text))
        if reason is not None:
            return self._reject(page, Tier.BODY_LIGHT, reason, len(text))
        return self._accept(page, Tier.BODY_LIGHT, text)

    def _raw_body_tier(self, page: _Page) -> ExtractionCandidate | None:
        text = dom.text_content(page.body).strip()
        reason = self._last_resort_reason(classify(text))
        if reason is not None:
            return self._reject(page, Tier.RAW_BODY, reason, len(text))
        return self._accept(page, Tier.RAW_BODY, text)


_default_pipeline = ExtractionPipeline()


def extract_content(
    root: lxml.html.HtmlElement,
    thresholds: Thresholds | None = None,
) -> ExtractionResult | None:
    """Extract the primary documentation text from a rendered DOM root."""
    pipeline = _default_pipeline if thresholds is None else ExtractionPipeline(thresholds)
    return pipeline.extract(root)


def extract_content_or_raise(
    root: lxml.html.HtmlElement,
    thresholds: Thresholds | None = None,
) -> ExtractionResult:
    """extract_content(), mapping "nothing acceptable" to InsufficientContentError."""
    pipeline = _default_pipeline if thresholds is None else ExtractionPipeline(thresholds)
    trace = ExtractionTrace()
    result = pipeline.extract(root, trace)
    if result is None:
        raise InsufficientContentError(debug=trace.as_dict())
    return result


def extract_html(raw_html: str | bytes, thresholds: Thresholds | None = None) -> ExtractionResult | None:
    """Parse a serialized snapshot and extract from it.

    Raises:
        DocumentParseError: the snapshot is empty or unparseable.
    """
    return extract_content(dom.parse_document(raw_html), thresholds)
