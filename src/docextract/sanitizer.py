# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""Subtree sanitization on cloned DOM nodes.

sanitize() deep-clones its input and strips, in order:

1. the selector groups it is given (scripts, page chrome, dialogs,
   class-name heuristics, known junk custom elements)
2. an optional element sweep (SweepRules): inline event handlers,
   script-like own text, denylisted class substrings and tag names

The input node is never touched. Selectors that fail to compile are skipped,
so one bad selector cannot abort the rest of a group. Running sanitize() on
its own output is a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import lxml.html

from docextract import dom
from docextract.errors import SelectorError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RemovalGroup:
    """Named, ordered list of CSS selectors whose matches are removed."""

    name: str
    selectors: tuple[str, ...]


# ---- removal groups (applied in the order a tier lists them) ----

SCRIPT_GROUP = RemovalGroup(
    "scripts",
    ("script", "style", "noscript", "iframe", "svg", "canvas", "code", "pre"),
)

# Scripts only; code samples (code, pre) survive
MARKUP_GROUP = RemovalGroup("markup", ("script", "style", "noscript", "iframe"))

COOKIE_CHROME_GROUP = RemovalGroup(
    "cookie-chrome",
    ("nav", "footer", "header", ".cookie-consent", '[class*="cookie"]', '[id*="cookie"]'),
)

CHROME_GROUP = RemovalGroup(
    "chrome",
    COOKIE_CHROME_GROUP.selectors + ('[class*="banner"]', '[id*="banner"]'),
)

DIALOG_GROUP = RemovalGroup(
    "dialogs",
    (
        '[role="dialog"]',
        '[aria-label*="cookie"]',
        '[aria-label*="Cookie"]',
        '[class*="modal"]',
        '[class*="overlay"]',
        '[class*="dialog"]',
    ),
)

HEURISTIC_GROUP = RemovalGroup(
    "class-heuristics",
    ('[class*="nav"]', '[class*="menu"]', '[class*="sidebar"]', '[class*="header"]', '[class*="footer"]'),
)

JUNK_TAGS: tuple[str, ...] = (
    "hgf-c360nav",
    "hgf-c360contextnav",
    "dx-scroll-manager",
    "dx-traffic-labeler",
    "doc-header",
    "doc-xml-content",
)

JUNK_GROUP = RemovalGroup("junk-elements", (".global-nav-container", *JUNK_TAGS))

STRUCTURAL_GROUP = RemovalGroup(
    "structural",
    ("script", "style", "noscript", "iframe", "svg", "canvas", "nav", "footer", "header"),
)

AGGRESSIVE_GROUPS: tuple[RemovalGroup, ...] = (
    SCRIPT_GROUP,
    CHROME_GROUP,
    DIALOG_GROUP,
    HEURISTIC_GROUP,
    JUNK_GROUP,
)


@dataclass(frozen=True, slots=True)
class SweepRules:
    """Element-level denylist applied after the selector groups.

    An element is removed if it has any event attribute, if its own text
    contains every token of any script_markers group, if its class contains a
    class_denylist substring, or if its tag is in tag_denylist.
    """

    event_attributes: frozenset[str] = frozenset({"onclick", "onload", "onerror"})
    script_markers: tuple[tuple[str, ...], ...] = (("function", "=>"),)
    class_denylist: tuple[str, ...] = ()
    tag_denylist: frozenset[str] = frozenset()

    def reason_for(self, el: lxml.html.HtmlElement) -> str | None:
        """Return why el should be swept, or None to keep it."""
        for attr in self.event_attributes:
            if el.get(attr) is not None:
                return f"event:{attr}"
        tag = dom.tag_name(el)
        if tag in self.tag_denylist:
            return f"tag:{tag}"
        if self.class_denylist:
            cls = dom.class_name(el).lower()
            for needle in self.class_denylist:
                if needle in cls:
                    return f"class:{needle}"
        if self.script_markers:
            text = dom.own_text(el)
            for markers in self.script_markers:
                if all(marker in text for marker in markers):
                    return "script-text"
        return None


MAIN_SWEEP = SweepRules(
    class_denylist=("script", "syntax", "nav", "cookie", "onetrust"),
    tag_denylist=frozenset({"script", "style", *JUNK_TAGS}),
)

BODY_SWEEP = SweepRules(
    script_markers=(
        ("function", "=>"),
        ("document.querySelector",),
        ("addEventListener",),
        ("fetch(",),
        ("const ", "= document"),
    ),
    tag_denylist=frozenset({"script", "style"}),
)


@dataclass
class SanitizeStats:
    """Statistics from one sanitize() call."""

    removed_nodes: int = 0
    removal_reasons: dict[str, int] = field(default_factory=dict)
    skipped_selectors: list[str] = field(default_factory=list)

    def record(self, reason: str) -> None:
        self.removed_nodes += 1
        self.removal_reasons[reason] = self.removal_reasons.get(reason, 0) + 1


@dataclass
class SanitizeResult:
    node: lxml.html.HtmlElement
    stats: SanitizeStats


def _strip_group(root: lxml.html.HtmlElement, group: RemovalGroup, stats: SanitizeStats) -> None:
    for selector in group.selectors:
        try:
            matches = dom.query_all(root, selector)
        except SelectorError as e:
            logger.debug("Skipping selector in group %s: %s", group.name, e)
            stats.skipped_selectors.append(selector)
            continue
        for el in matches:
            # Already gone with an ancestor matched earlier in this pass
            if not dom.is_attached(el, root):
                continue
            if dom.remove(el):
                stats.record(group.name)


def _sweep(root: lxml.html.HtmlElement, rules: SweepRules, stats: SanitizeStats) -> None:
    # Collect first: removing while iterating would skip siblings
    to_remove: list[tuple[lxml.html.HtmlElement, str]] = []
    for el in dom.iter_light_elements(root):
        reason = rules.reason_for(el)
        if reason is not None:
            to_remove.append((el, reason))

    for el, reason in to_remove:
        if not dom.is_attached(el, root):
            continue
        if dom.remove(el):
            stats.record(f"sweep-{reason}")


def sanitize(
    node: lxml.html.HtmlElement,
    groups: tuple[RemovalGroup, ...] = AGGRESSIVE_GROUPS,
    *,
    sweep: SweepRules | None = None,
) -> SanitizeResult:
    """Clone node and strip unwanted subtrees from the clone.

    Args:
        node: Element to sanitize. Left unchanged.
        groups: Removal groups, applied in order.
        sweep: Optional element-level denylist applied last.

    Returns:
        SanitizeResult with the stripped clone and removal statistics.
    """
    cloned = dom.clone(node)
    stats = SanitizeStats()

    for group in groups:
        _strip_group(cloned, group, stats)
    if sweep is not None:
        _sweep(cloned, sweep, stats)

    logger.debug(
        "Sanitized <%s>: %d nodes removed (%s)",
        dom.tag_name(node) or "?",
        stats.removed_nodes,
        stats.removal_reasons,
    )
    return SanitizeResult(node=cloned, stats=stats)


def strip(
    node: lxml.html.HtmlElement,
    groups: tuple[RemovalGroup, ...] = AGGRESSIVE_GROUPS,
    *,
    sweep: SweepRules | None = None,
) -> lxml.html.HtmlElement:
    """sanitize() returning only the stripped clone."""
    return sanitize(node, groups, sweep=sweep).node
