# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""lxml DOM adapter with browser query and textContent semantics.

The rendering layer hands over a serialized snapshot in which shadow roots
are declarative: a ``<template shadowrootmode="open">`` child of the host,
as produced by ``getHTML({serializableShadowRoots: true})``.

Template contents are inert, as in a browser:
- query_one()/query_all() never return nodes inside a template below the
  query root, and never return the root itself
- text_content() skips template subtrees
- querying a shadow root searches that tree but not nested shadow roots
"""

from __future__ import annotations

import copy
import functools
import logging
from collections.abc import Iterator

import lxml.html
from cssselect import SelectorError as CssSelectorError
from lxml import etree
from lxml.cssselect import CSSSelector

from docextract.errors import DocumentParseError, SelectorError

logger = logging.getLogger(__name__)

_TEMPLATE_TAG = "template"
_SHADOW_ROOT_ATTRS = ("shadowrootmode", "shadowroot")  # current + legacy Chrome spelling


def parse_document(raw_html: str | bytes) -> lxml.html.HtmlElement:
    """Parse a rendered HTML snapshot into an lxml document root.

    Raises:
        DocumentParseError: input is empty or unparseable.
    """
    if not raw_html or not raw_html.strip():
        raise DocumentParseError("Empty HTML input")
    data = raw_html.encode("utf-8") if isinstance(raw_html, str) else raw_html
    try:
        parser = lxml.html.HTMLParser(recover=True, encoding="utf-8")
        return lxml.html.document_fromstring(data, parser=parser)
    except (etree.ParserError, etree.XMLSyntaxError, ValueError) as e:
        raise DocumentParseError(f"lxml parsing failed: {e}") from e


def tag_name(el: etree._Element) -> str:
    """Lower-case tag name, or "" for comments and processing instructions."""
    tag = el.tag
    return tag.lower() if isinstance(tag, str) else ""


def is_element(node: etree._Element) -> bool:
    return isinstance(node.tag, str)


def class_name(el: etree._Element) -> str:
    return el.get("class") or ""


def is_shadow_root(el: etree._Element) -> bool:
    """True for a declarative shadow-root template."""
    if tag_name(el) != _TEMPLATE_TAG:
        return False
    return any(el.get(attr) is not None for attr in _SHADOW_ROOT_ATTRS)


def shadow_root(el: etree._Element) -> etree._Element | None:
    """Return the host's shadow root (first declarative template child)."""
    for child in el:
        if is_shadow_root(child):
            return child
    return None


def body_of(root: lxml.html.HtmlElement) -> lxml.html.HtmlElement:
    """Return <body> for a document root, else the element itself."""
    tag = tag_name(root)
    if tag == "body":
        return root
    if tag == "html":
        body = root.find("body")
        if body is not None:
            return body
    return root


def light_children(el: etree._Element) -> list[etree._Element]:
    """Element children, excluding template contents."""
    return [child for child in el if is_element(child) and tag_name(child) != _TEMPLATE_TAG]


def iter_light_elements(root: etree._Element) -> Iterator[etree._Element]:
    """Yield descendant elements of root in document order, skipping templates.

    Iterative so that deeply nested pages cannot hit the recursion limit.
    """
    stack = [iter(root)]
    while stack:
        for child in stack[-1]:
            if not is_element(child) or tag_name(child) == _TEMPLATE_TAG:
                continue
            yield child
            stack.append(iter(child))
            break
        else:
            stack.pop()


@functools.lru_cache(maxsize=512)
def compile_selector(selector: str) -> CSSSelector:
    """Compile a CSS selector, cached per selector string.

    Raises:
        SelectorError: selector is malformed or unsupported.
    """
    try:
        return CSSSelector(selector, translator="html")
    except CssSelectorError as e:
        raise SelectorError(f"Invalid selector {selector!r}: {e}", selector=selector) from e


def _is_encapsulated(el: etree._Element, root: etree._Element) -> bool:
    """True if a template sits between el and root."""
    parent = el.getparent()
    while parent is not None and parent is not root:
        if tag_name(parent) == _TEMPLATE_TAG:
            return True
        parent = parent.getparent()
    return False


def query_all(root: etree._Element, selector: str) -> list[etree._Element]:
    """querySelectorAll(): matching descendants of root in document order.

    Raises:
        SelectorError: selector is malformed.
    """
    matcher = compile_selector(selector)
    return [
        el
        for el in matcher(root)
        if el is not root and not is_shadow_root(el) and not _is_encapsulated(el, root)
    ]


def query_one(root: etree._Element, selector: str) -> etree._Element | None:
    """querySelector(): first matching descendant of root, or None."""
    matches = query_all(root, selector)
    return matches[0] if matches else None


def text_content(el: etree._Element) -> str:
    """Browser ``textContent``: all descendant text, comments and templates excluded."""
    parts = [el.text or ""]
    # (children iterator, tail of the element that owns it)
    stack: list[tuple[Iterator[etree._Element], str | None]] = [(iter(el), None)]
    while stack:
        children, owner_tail = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            if owner_tail:
                parts.append(owner_tail)
            continue
        if is_element(child) and tag_name(child) != _TEMPLATE_TAG:
            parts.append(child.text or "")
            stack.append((iter(child), child.tail))
        elif child.tail:
            parts.append(child.tail)
    return "".join(parts)


def own_text(el: etree._Element) -> str:
    """Text nodes that are direct children of el (its text plus child tails)."""
    return (el.text or "") + "".join(child.tail or "" for child in el)


def clone(el: lxml.html.HtmlElement) -> lxml.html.HtmlElement:
    """Deep, detached copy of el. The trailing text belongs to the parent and is dropped."""
    cloned = copy.deepcopy(el)
    cloned.tail = None
    return cloned


def remove(el: lxml.html.HtmlElement) -> bool:
    """Element.remove(): drop el and its subtree, keep its trailing text.

    Returns False for a root that has no parent.
    """
    if el.getparent() is None:
        return False
    el.drop_tree()
    return True


def is_attached(el: etree._Element, root: etree._Element) -> bool:
    """True if root is an ancestor-or-self of el."""
    node = el
    while node is not None:
        if node is root:
            return True
        node = node.getparent()
    return False
