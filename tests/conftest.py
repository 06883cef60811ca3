# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import docextract  # noqa: F401
except ImportError:
    raise ImportError("docextract is not installed. Run: pip install -e '.[test]'") from None

import logging

import pytest
import structlog

from docextract.config import ENV_PREFIX


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Safety net: DOCEXTRACT_* variables from the shell never leak into tests."""
    import os

    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def reset_logging():
    """Restore root handlers and structlog defaults after a test configures logging."""
    root = logging.getLogger()
    old_handlers = root.handlers[:]
    old_level = root.level
    yield
    root.handlers = old_handlers
    root.setLevel(old_level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
