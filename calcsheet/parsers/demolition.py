from __future__ import annotations

import re

from ..models.items import ParsedItem
from .dimensions import extract_dimensions, extract_thickness

__all__ = [
    "DEMOLITION_TAGS",
    "ITEM_TYPES",
    "parse_demolition_item",
    "demolition_group_key",
]

DEMOLITION_TAGS: dict[str, str] = {
    "Demo slab on grade": "demo_sog",
    "Demo Ramp on grade": "demo_rog",
    "Demo strip footing": "demo_sf",
    "Demo foundation wall": "demo_fw",
    "Demo retaining wall": "demo_rw",
    "Demo isolated footing": "demo_isolated_footing",
    "Demo stair on grade": "demo_stair",
}

EXTRA_TAGS = ("demo_extra_sqft", "demo_extra_ft", "demo_extra_ea")

ITEM_TYPES = frozenset(DEMOLITION_TAGS.values()) | frozenset(EXTRA_TAGS)

_SLAB_SUBSECTIONS = ("Demo slab on grade", "Demo Ramp on grade")
_BRACKET_SUBSECTIONS = (
    "Demo strip footing",
    "Demo foundation wall",
    "Demo retaining wall",
    "Demo isolated footing",
    "Demo stair on grade",
)


def demolition_group_key(text: str, subsection: str) -> str:
    if subsection in _SLAB_SUBSECTIONS and '"' in text:
        m = re.search(r"(\d+)[\"']?\s*thick", text, re.IGNORECASE)
        if m:
            return f"THICK_{m.group(1)}"
    elif subsection in _BRACKET_SUBSECTIONS and "(" in text:
        m = re.search(r"\(([^x)]+)", text)
        if m:
            return f"DIM_{m.group(1).strip()}"
    return "DEFAULT"


def parse_demolition_item(text: str, subsection: str) -> ParsedItem:
    """Slabs/ramps: thickness (4" default). Footings/walls: bracket width x height.
    Isolated footings: bracket length x width x height."""
    length = width = height = None
    if subsection in _SLAB_SUBSECTIONS:
        thickness = extract_thickness(text)
        height = thickness if thickness > 0 else 4 / 12
    elif subsection in ("Demo strip footing", "Demo foundation wall", "Demo retaining wall"):
        dims = extract_dimensions(text)
        width = dims.get("width") or None
        height = dims.get("height") or None
    elif subsection == "Demo isolated footing":
        dims = extract_dimensions(text)
        length = dims.get("length") or None
        width = dims.get("width") or None
        height = dims.get("height") or None

    return ParsedItem(
        type=DEMOLITION_TAGS.get(subsection),
        subsection=subsection,
        group_key=demolition_group_key(text, subsection),
        length=length,
        width=width,
        height=height,
    )
