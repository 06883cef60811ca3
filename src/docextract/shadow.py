# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""Depth-bounded search across nested shadow roots.

Help-portal pages nest their documentation several shadow roots deep, where
ordinary queries from the document cannot see it. find_in_shadow() walks:

1. the node's own shadow root, queried directly for the selector
2. the elements of that shadow tree, at depth + 1
3. the node's light-DOM children, at the same depth

Only crossing into a shadow root consumes depth. Query failures are treated
as "no match here" and the walk continues.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from lxml import etree

from docextract import dom
from docextract.errors import SelectorError

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10


def _query_shadow(shadow: etree._Element, selector: str) -> etree._Element | None:
    try:
        return dom.query_one(shadow, selector)
    except SelectorError as e:
        logger.debug("Shadow query failed: %s", e)
        return None


def _traverse(el: etree._Element, selector: str, depth: int, max_depth: int) -> etree._Element | None:
    if depth > max_depth:
        return None

    shadow = dom.shadow_root(el)
    if shadow is not None:
        match = _query_shadow(shadow, selector)
        if match is not None:
            return match
        for child in dom.light_children(shadow):
            found = _traverse(child, selector, depth + 1, max_depth)
            if found is not None:
                return found

    for child in dom.light_children(el):
        found = _traverse(child, selector, depth, max_depth)
        if found is not None:
            return found
    return None


def find_in_shadow(
    root: etree._Element | None,
    selector: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> etree._Element | None:
    """Find the first element matching selector inside root's shadow trees.

    Order is depth-first, leftmost-first, own shadow match before children.
    A match inside the shadow root of a host at depth ``max_depth`` is
    found; anything deeper is not.
    """
    if root is None:
        return None
    return _traverse(root, selector, 0, max_depth)


def find_first_in_shadow(
    root: etree._Element | None,
    selectors: Iterable[str],
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> etree._Element | None:
    """Try selectors in priority order; return the first hit."""
    for selector in selectors:
        found = find_in_shadow(root, selector, max_depth)
        if found is not None:
            return found
    return None
