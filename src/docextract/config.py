# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""Extraction thresholds.

Every numeric knob of the pipeline lives on one frozen object that is
injected at pipeline construction. Environment overrides follow the
``DOCEXTRACT_<FIELD>`` convention, e.g. ``DOCEXTRACT_MAIN_MIN_LENGTH=300``.
"""

from __future__ import annotations

import dataclasses
import math
import os
from collections.abc import Mapping
from dataclasses import dataclass

from docextract.errors import ConfigError

ENV_PREFIX = "DOCEXTRACT_"


@dataclass(frozen=True, slots=True)
class Thresholds:
    """Length floors, ratio ceilings and depth caps for one pipeline."""

    # ---- tier 1: shadow-hosted content ----
    shadow_min_length: int = 200
    shadow_container_min_length: int = 500
    shadow_max_depth: int = 10

    # ---- tier 2: primary main element ----
    main_min_length: int = 200
    main_max_cookie_ratio: float = 0.10
    main_cookie_reject_length: int = 500
    main_paragraph_min_length: int = 30

    # ---- tier 3: keep-longest selector scan ----
    selector_min_length: int = 1000
    selector_max_cookie_ratio: float = 0.05

    # ---- tier 4: largest element ----
    fallback_min_length: int = 500
    fallback_max_cookie_keywords: int = 3
    fallback_cookie_escape_length: int = 2000

    # ---- tier 5: whole body ----
    body_min_length: int = 500
    body_max_cookie_ratio: float = 0.20
    body_cookie_escape_length: int = 5000
    body_paragraph_min_length: int = 50

    # ---- tiers 6-7: last resort ----
    last_resort_min_length: int = 100
    last_resort_max_cookie_ratio: float = 0.10
    last_resort_cookie_reject_length: int = 500

    # ---- shared ----
    max_code_ratio: float = 0.10
    js_pattern_threshold: int = 2
    link_title_min_length: int = 10
    preview_length: int = 300

    def __post_init__(self) -> None:
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, float) and math.isnan(value):
                raise ConfigError(f"{f.name} must be a number, got nan")
            if value < 0:
                raise ConfigError(f"{f.name} must be >= 0, got {value}")
            if isinstance(value, float) and value > 1.0:
                raise ConfigError(f"{f.name} is a ratio and must be <= 1.0, got {value}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Thresholds:
        """Build thresholds from defaults overlaid with DOCEXTRACT_* variables.

        Args:
            environ: Mapping to read instead of ``os.environ`` (tests).

        Raises:
            ConfigError: a variable is set but cannot be parsed.
        """
        env = os.environ if environ is None else environ
        overrides: dict[str, int | float] = {}
        for f in dataclasses.fields(cls):
            key = f"{ENV_PREFIX}{f.name.upper()}"
            raw = env.get(key, "").strip()
            if not raw:
                continue
            caster = type(f.default)
            try:
                overrides[f.name] = caster(raw)
            except ValueError:
                raise ConfigError(f"{key}={raw!r} is not a valid {caster.__name__}") from None
        return cls(**overrides)
