from __future__ import annotations

import re

from .base import classifier, contains_any

__all__ = [
    "MUD_SLAB_RE",
    "is_excavation_item",
    "is_backfill_item",
    "is_mud_slab_item",
    "is_rock_excavation_item",
    "is_line_drill_item",
]

MUD_SLAB_RE = re.compile(r"w/\s*(\d+)[\"']?\s*mud\s*slab", re.IGNORECASE)

_EXCAVATION_PATTERNS = (
    re.compile(r"^sf\s*\("),
    re.compile(r"^wf-\d+"),
    re.compile(r"^st-\d+"),
    re.compile(r"^pc-\d+"),
    re.compile(r"^f-\d+\s*\("),
    re.compile(r"^exc\s*\("),
)


@classifier
def is_excavation_item(text: str) -> bool:
    if "gravel" in text or text.startswith("backfill"):
        return False
    if contains_any(text, "rock excavation", "concrete pier"):
        return False
    if contains_any(
        text,
        "underground piping",
        "heel block",
        "slope exc",
        "exc & backfill",
        "duplex sewage ejector pit slab",
    ):
        return True
    return any(p.search(text) for p in _EXCAVATION_PATTERNS)


@classifier
def is_backfill_item(text: str) -> bool:
    if contains_any(text, "underground piping", "slope exc", "exc & backfill"):
        return True
    return re.search(r"^backfill\s*\(", text) is not None


@classifier
def is_mud_slab_item(text: str) -> bool:
    return MUD_SLAB_RE.search(text) is not None


@classifier
def is_rock_excavation_item(text: str) -> bool:
    return contains_any(text, "concrete pier", "duplex sewage ejector pit slab", "rock excavation", "line drill")


@classifier
def is_line_drill_item(text: str) -> bool:
    return "line drill" in text
