# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for docextract.shadow: depth-bounded search across shadow roots."""

from __future__ import annotations

import pytest

from docextract import dom
from docextract.shadow import DEFAULT_MAX_DEPTH, find_first_in_shadow, find_in_shadow
from tests._dom_helpers import nested_shadow, parse_doc, parse_el, shadow_host

TARGET = '<div class="target">found</div>'


def _host(markup: str):
    return dom.body_of(parse_doc(markup))


# ---------------------------------------------------------------------------
# Basic discovery
# ---------------------------------------------------------------------------


class TestFindInShadow:
    def test_none_root(self):
        assert find_in_shadow(None, ".target") is None

    def test_direct_shadow_match(self):
        host = parse_el(shadow_host("doc-xml-content", TARGET))
        found = find_in_shadow(host, ".target")
        assert found is not None
        assert dom.text_content(found) == "found"

    def test_light_dom_match_is_ignored(self):
        host = parse_el(f"<div>{TARGET}</div>")
        assert find_in_shadow(host, ".target") is None

    def test_shadow_under_light_descendant(self):
        body = _host("<section><div>" + shadow_host("x-card", TARGET) + "</div></section>")
        assert find_in_shadow(body, ".target") is not None

    def test_shadow_match_nested_deep_in_shadow_tree(self):
        inner = "<div><div><div>" + TARGET + "</div></div></div>"
        host = parse_el(shadow_host("x-card", inner))
        assert find_in_shadow(host, ".target") is not None

    def test_no_match(self):
        host = parse_el(shadow_host("x-card", "<p>nothing here</p>"))
        assert find_in_shadow(host, ".target") is None


# ---------------------------------------------------------------------------
# Depth bound
# ---------------------------------------------------------------------------


class TestDepthBound:
    @pytest.mark.parametrize("max_depth", [0, 1, 3, DEFAULT_MAX_DEPTH])
    def test_found_at_max_depth(self, max_depth):
        # Target sits in the shadow root of the host at depth max_depth
        body = _host(nested_shadow(max_depth + 1, TARGET))
        assert find_in_shadow(body, ".target", max_depth=max_depth) is not None

    @pytest.mark.parametrize("max_depth", [0, 1, 3, DEFAULT_MAX_DEPTH])
    def test_not_found_beyond_max_depth(self, max_depth):
        body = _host(nested_shadow(max_depth + 2, TARGET))
        assert find_in_shadow(body, ".target", max_depth=max_depth) is None

    def test_light_descent_does_not_consume_depth(self):
        deep_light = "<div>" * 50 + shadow_host("x-card", TARGET) + "</div>" * 50
        body = _host(deep_light)
        assert find_in_shadow(body, ".target", max_depth=0) is not None


# ---------------------------------------------------------------------------
# Ordering and failure handling
# ---------------------------------------------------------------------------


class TestOrdering:
    def test_own_shadow_before_children(self):
        inner_host = shadow_host("x-inner", '<div class="target" id="deep">deep</div>')
        outer = shadow_host("x-outer", inner_host + '<div class="target" id="shallow">shallow</div>')
        found = find_in_shadow(parse_el(outer), ".target")
        assert found.get("id") == "shallow"

    def test_leftmost_first(self):
        left = shadow_host("x-a", '<div class="target" id="left">l</div>')
        right = shadow_host("x-b", '<div class="target" id="right">r</div>')
        body = _host(f"<div>{left}</div><div>{right}</div>")
        assert find_in_shadow(body, ".target").get("id") == "left"

    def test_shadow_children_before_light_children(self):
        host = (
            '<x-outer><template shadowrootmode="open">'
            + shadow_host("x-in", '<div class="target" id="shadow">s</div>')
            + "</template>"
            + shadow_host("x-light", '<div class="target" id="light">l</div>')
            + "</x-outer>"
        )
        assert find_in_shadow(parse_el(host), ".target").get("id") == "shadow"

    def test_malformed_selector_returns_none(self):
        host = parse_el(shadow_host("x-card", TARGET))
        assert find_in_shadow(host, "div[[") is None


class TestFindFirstInShadow:
    def test_selector_priority(self):
        inner = '<div class="b" id="b">b</div><div class="a" id="a">a</div>'
        host = parse_el(shadow_host("x-card", inner))
        assert find_first_in_shadow(host, (".a", ".b")).get("id") == "a"

    def test_falls_through_to_later_selector(self):
        host = parse_el(shadow_host("x-card", '<div class="b">b</div>'))
        assert find_first_in_shadow(host, ("div[[", ".a", ".b")) is not None

    def test_empty_selectors(self):
        assert find_first_in_shadow(parse_el(shadow_host("x-card", TARGET)), ()) is None
