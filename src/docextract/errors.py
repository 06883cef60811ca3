# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""docextract exception hierarchy.

All docextract-specific errors inherit from DocExtractError, allowing callers
to catch the base class for any extraction failure or specific subclasses
for targeted handling.

"No acceptable content" is a normal negative result (``None``) from the
pipeline; InsufficientContentError exists for callers that want it mapped to
an exception.
"""

from __future__ import annotations


class DocExtractError(Exception):
    """Base exception for all docextract errors."""


class DocumentParseError(DocExtractError):
    """HTML snapshot is empty or could not be parsed."""


class SelectorError(DocExtractError):
    """CSS selector could not be compiled."""

    def __init__(self, message: str, *, selector: str = "") -> None:
        super().__init__(message)
        self.selector = selector


class ConfigError(DocExtractError):
    """Threshold configuration is malformed or out of range."""


class InsufficientContentError(DocExtractError):
    """No extraction tier produced acceptable content."""

    def __init__(self, message: str = "insufficient content extracted", *, debug: dict | None = None) -> None:
        super().__init__(message)
        self.debug = debug or {}
