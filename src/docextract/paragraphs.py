# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""Paragraph salvage and link-title extraction.

When a container's text mixes prose with inline script, the whole blob is
useless but most of its block-level fragments are fine. filter_paragraphs()
keeps the fragments that do not look like code and joins them with blank
lines. Link titles are appended unconditionally: help portals put precise
descriptions in ``<a title="...">`` rather than in link text.
"""

from __future__ import annotations

from dataclasses import dataclass

from lxml import etree

from docextract import dom
from docextract.quality import js_pattern_count, looks_like_code

_HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
_BLOCK_TAGS = frozenset({"p", "div", "span", "li", "td", "th", "dd", "dt"})


@dataclass(frozen=True, slots=True)
class ParagraphProfile:
    """Per-tier salvage settings."""

    name: str
    tags: frozenset[str]
    min_fragment_length: int  # fragment kept only if longer than this
    accept_length: int  # joined result returned only if longer than this
    excluded_tokens: tuple[str, ...] = ()


MAIN_PROFILE = ParagraphProfile(
    name="main",
    tags=_BLOCK_TAGS | _HEADING_TAGS,
    min_fragment_length=30,
    accept_length=200,
    excluded_tokens=("console.", "window."),
)

BODY_PROFILE = ParagraphProfile(
    name="body",
    tags=_BLOCK_TAGS,
    min_fragment_length=50,
    accept_length=500,
)


def extract_link_titles(container: etree._Element, min_length: int = 10) -> list[str]:
    """Trimmed ``title`` attributes of anchors, longer than min_length."""
    titles: list[str] = []
    for link in dom.query_all(container, "a[title]"):
        title = (link.get("title") or "").strip()
        if len(title) > min_length:
            titles.append(title)
    return titles


def append_link_titles(text: str, titles: list[str]) -> str:
    if not titles:
        return text
    return text + "\n\n" + "\n".join(titles)


def _inside_kept(el: etree._Element, kept: set[etree._Element], container: etree._Element) -> bool:
    parent = el.getparent()
    while parent is not None and parent is not container:
        if parent in kept:
            return True
        parent = parent.getparent()
    return False


def filter_paragraphs(
    container: etree._Element,
    whole_text: str,
    profile: ParagraphProfile = BODY_PROFILE,
    *,
    js_threshold: int = 2,
    link_title_min_length: int = 10,
) -> str | None:
    """Salvage prose fragments from a container whose text looks like code.

    Args:
        container: Sanitized clone to enumerate.
        whole_text: The container's full text, used to decide applicability.
        profile: Tag set and length floors for the calling tier.

    Returns:
        Blank-line-joined fragments (plus link titles), or None when the text
        is not code-like, nothing survives, or the result is too short.
    """
    if js_pattern_count(whole_text) <= js_threshold:
        return None

    fragments: list[str] = []
    kept: set[etree._Element] = set()
    for el in dom.iter_light_elements(container):
        if dom.tag_name(el) not in profile.tags:
            continue
        # Text already included through a kept ancestor
        if _inside_kept(el, kept, container):
            continue
        text = dom.text_content(el).strip()
        if len(text) <= profile.min_fragment_length:
            continue
        if looks_like_code(text, profile.excluded_tokens):
            continue
        kept.add(el)
        fragments.append(text)

    fragments.extend(extract_link_titles(container, link_title_min_length))
    if not fragments:
        return None

    joined = "\n\n".join(fragments)
    if len(joined) <= profile.accept_length:
        return None
    return joined
