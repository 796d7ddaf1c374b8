from __future__ import annotations

import re

from ..classifiers.waterproofing import PIT_WALL_PATTERNS
from ..models.items import ParsedItem
from .dimensions import parse_dimension

__all__ = [
    "ITEM_TYPES",
    "waterproofing_group_key",
    "pit_ref_key",
    "parse_exterior_side",
    "parse_exterior_side_pit",
    "parse_negative_side_wall",
    "parse_negative_side_slab",
]

ITEM_TYPES = frozenset({
    "waterproofing_exterior_side",
    "waterproofing_exterior_side_pit",
    "waterproofing_negative_side_wall",
    "waterproofing_negative_side_slab",
})

# membrane laps 2'-0" above the wall height
EXTERIOR_LAP = 2

_BRACKET_RE = re.compile(r"\(([^)]+)\)")
_TRAILING_THICK_RE = re.compile(r"(\d+)[\"']?\s*$")
_FIRST_DIM_RE = re.compile(r"\(([^x)]+)")


def _bracket_pair(text: str) -> tuple[str, str] | None:
    m = _BRACKET_RE.search(text)
    if not m:
        return None
    parts = [s.strip() for s in m.group(1).split("x")]
    if len(parts) < 2:
        return None
    return parts[0], parts[1]


def waterproofing_group_key(text: object) -> str:
    """``THICK_<n>`` for slabs ending in a thickness, ``DIM_<first>`` for bracketed walls, else ``OTHER``."""
    if not isinstance(text, str) or not text:
        return "OTHER"
    text = text.strip()
    if "slab" in text.lower():
        m = _TRAILING_THICK_RE.search(text)
        if m:
            return f"THICK_{m.group(1)}"
    if "(" in text and "x" in text:
        m = _FIRST_DIM_RE.search(text)
        if m:
            return f"DIM_{m.group(1).strip()}"
    return "OTHER"


def pit_ref_key(text: object) -> str | None:
    if not isinstance(text, str):
        return None
    lower = text.strip().lower()
    for key, pattern in PIT_WALL_PATTERNS.items():
        if pattern.search(lower):
            return key
    return None


def parse_exterior_side(text: str) -> ParsedItem:
    parsed = ParsedItem(type="waterproofing_exterior_side", group_key=waterproofing_group_key(text))
    pair = _bracket_pair(text)
    if pair is None:
        return parsed
    second = parse_dimension(pair[1])
    if second == 0 and pair[1] != "0":
        return parsed
    return parsed.with_(height=second + EXTERIOR_LAP, second_value_feet=second)


def parse_exterior_side_pit(text: str) -> ParsedItem:
    parsed = ParsedItem(type="waterproofing_exterior_side_pit", ref_key=pit_ref_key(text), height=0.0)
    pair = _bracket_pair(text)
    if pair is None:
        return parsed
    first = parse_dimension(pair[0])
    return parsed.with_(
        height=parse_dimension(pair[1]) + EXTERIOR_LAP,
        first_value_feet=first if first > 0 else None,
    )


def parse_negative_side_wall(text: str) -> ParsedItem:
    parsed = ParsedItem(type="waterproofing_negative_side_wall", ref_key=pit_ref_key(text))
    pair = _bracket_pair(text)
    if pair is None:
        return parsed
    second = parse_dimension(pair[1])
    return parsed.with_(height=second, second_value_feet=second)


def parse_negative_side_slab(text: str) -> ParsedItem:
    return ParsedItem(type="waterproofing_negative_side_slab", group_key=waterproofing_group_key(text))
