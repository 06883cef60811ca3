# Copyright (C) 2026 The docextract Authors
# SPDX-License-Identifier: AGPL-3.0-only

"""Tier identifiers, extraction candidates and the per-call diagnostic trace."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import IntEnum

Scalar = str | int | float | bool | None


class Tier(IntEnum):
    """Extraction tiers in priority order."""

    SHADOW = 1
    MAIN = 2
    MAIN_SELECTORS = 3
    LARGEST_ELEMENT = 4
    BODY = 5
    BODY_LIGHT = 6
    RAW_BODY = 7

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


@dataclass(frozen=True, slots=True)
class ExtractionCandidate:
    """Tentative text produced by one tier attempt."""

    text: str
    tier: Tier

    @property
    def length(self) -> int:
        return len(self.text)


@dataclass
class ExtractionTrace:
    """Diagnostics accumulated across one pipeline invocation.

    Created once per call and passed by reference to every tier. Never reused.
    """

    # document survey
    body_text_length: int = 0
    div_count: int = 0
    paragraph_count: int = 0

    # shadow / content container discovery
    shadow_host_found: bool = False
    shadow_root_found: bool = False
    shadow_search_attempted: bool = False
    shadow_search_result: bool = False
    content_container_found: bool = False
    content_container_classes: str | None = None
    content_container_text_length: int = 0
    body_content_found: bool = False
    body_content_classes: str | None = None
    body_content_text_length: int = 0
    shadow_content_length: int = 0

    # main element
    main_element_found: bool = False
    main_element_tag: str | None = None
    main_element_classes: str | None = None
    main_text_length: int = 0
    main_text_preview: str = ""

    # scans
    selector_matches: int = 0
    selector_errors: int = 0
    paragraph_salvage_used: bool = False

    # outcome
    succeeded_tier: int | None = None
    succeeded_tier_name: str | None = None
    candidate_lengths: dict[str, int] = field(default_factory=dict)
    rejections: dict[str, str] = field(default_factory=dict)

    def record_candidate(self, tier: Tier, length: int) -> None:
        self.candidate_lengths[tier.label] = length

    def record_rejection(self, tier: Tier, reason: str) -> None:
        self.rejections[tier.label] = reason

    def record_success(self, tier: Tier) -> None:
        self.succeeded_tier = int(tier)
        self.succeeded_tier_name = tier.label

    def as_dict(self) -> dict[str, Scalar]:
        """Flatten to ``{key: scalar}`` for logging and JSON output."""
        out: dict[str, Scalar] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, dict):
                continue
            out[f.name] = value
        for label, length in self.candidate_lengths.items():
            out[f"{label}_candidate_length"] = length
        for label, reason in self.rejections.items():
            out[f"{label}_rejected"] = reason
        return out
