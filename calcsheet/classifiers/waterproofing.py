from __future__ import annotations

import re

from .base import classifier

__all__ = [
    "PIT_WALL_PATTERNS",
    "is_exterior_side_item",
    "is_exterior_side_pit_item",
    "is_negative_side_wall_item",
    "is_negative_side_slab_item",
]

# height reference key -> pit wall notation
PIT_WALL_PATTERNS: dict[str, re.Pattern[str]] = {
    "deep_sewage_ejector_pit": re.compile(r"deep\s+sewage\s+ejector(?:\s+pit)?\s+wall"),
    "elevator_pit": re.compile(r"(elev\.?|elevator)(?:\s+pit)?\s+wall"),
    "detention_tank": re.compile(r"detention\s+tank\s+wall"),
    "duplex_sewage_ejector_pit": re.compile(r"duplex\s+sewage\s+ejector(?:\s+pit)?\s+wall"),
    "grease_trap": re.compile(r"grease\s+trap(?:\s+pit)?\s+(wall|slab)"),
    "house_trap": re.compile(r"house\s+trap(?:\s+pit)?\s+(wall|slab)"),
}

_NEGATIVE_SLAB_PATTERNS = tuple(
    re.compile(p)
    for p in (
        r"house\s+trap(?:\s+pit)?\s+slab",
        r"grease\s+trap(?:\s+pit)?\s+slab",
        r"deep\s+sewage\s+ejector(?:\s+pit)?\s+slab",
        r"duplex\s+sewage\s+ejector(?:\s+pit)?\s+slab",
        r"detention\s+tank\s+lid\s+slab",
        r"detention\s+tank(?:\s+pit)?\s+slab(?!\s+lid)",
        r"(elev\.?|elevator)(?:\s+pit)?\s+slab",
    )
)

_WALL_PREFIXES = ("fw (", "fw(", "rw (", "rw(")
_WALL_MARKERS = ("vehicle barrier wall (", "concrete liner wall (", "stem wall (")


@classifier
def is_exterior_side_item(text: str) -> bool:
    text = text.strip()
    return text.startswith(_WALL_PREFIXES) or any(m in text for m in _WALL_MARKERS)


@classifier
def is_exterior_side_pit_item(text: str) -> bool:
    text = text.strip()
    if "slab" in text:
        return False
    return any(p.search(text) for p in PIT_WALL_PATTERNS.values())


@classifier
def is_negative_side_wall_item(text: str) -> bool:
    return is_exterior_side_pit_item(text)


@classifier
def is_negative_side_slab_item(text: str) -> bool:
    text = text.strip()
    if "slab" not in text:
        return False
    return any(p.search(text) for p in _NEGATIVE_SLAB_PATTERNS)
