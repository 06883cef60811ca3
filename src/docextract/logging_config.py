# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""structlog + stdlib bridge for the CLI and embedding harvesters.

Library modules log through ``logging.getLogger(__name__)`` only; nothing is
configured on import. Call configure() once from the process entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog


def configure(*, json_output: bool = False, level: str = "INFO", stream: TextIO | None = None) -> None:
    """Route stdlib logging through structlog renderers.

    Args:
        json_output: True for JSON lines (batch harvesting), False for console.
        level: Root logger level name (default INFO). Unknown names fall back to INFO.
        stream: Destination stream (default sys.stderr; stdout carries content).
    """
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    renderer = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def bind_source(source: str) -> None:
    """Attach the snapshot being processed to every subsequent log line."""
    structlog.contextvars.bind_contextvars(source=source)


def clear_source() -> None:
    structlog.contextvars.unbind_contextvars("source")
