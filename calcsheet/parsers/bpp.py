from __future__ import annotations

import re

from ..classifiers.bpp import bpp_subsection, extract_street_name
from ..models.items import ParsedItem
from .dimensions import format_number

__all__ = [
    "ITEM_TYPES",
    "SUBSECTION_TAGS",
    "GRAVEL_INCHES",
    "ROAD_BASE_INCHES",
    "parse_bpp_item",
    "manual_bpp_item",
]

SUBSECTION_TAGS: dict[str, str] = {
    "Concrete sidewalk": "bpp_concrete_sidewalk",
    "Concrete driveway": "bpp_concrete_driveway",
    "Concrete curb": "bpp_concrete_curb",
    "Expansion joint": "bpp_expansion_joint",
    "Full depth asphalt pavement": "bpp_full_depth_asphalt",
}

# synthetic rows emitted once per street
ITEM_TYPES = frozenset({*SUBSECTION_TAGS.values(), "bpp_gravel", "bpp_conc_road_base"})

GRAVEL_INCHES = (4, 6)
ROAD_BASE_INCHES = 6

_THICK_RE = re.compile(r"(\d+(?:\.\d+)?)\s*\"\s*thick", re.IGNORECASE)
_CURB_WIDTH_RE = re.compile(r"(\d+(?:\.\d+)?)\s*\"\s*wide", re.IGNORECASE)
_CURB_HEIGHT_RE = re.compile(r"Height\s*=\s*(\d+)'\s*-?\s*(\d+)\"", re.IGNORECASE)
_LAYER_RES = {
    name: re.compile(rf"(\d+(?:\.\d+)?)\s*\"\s*(?:thick\s+)?{name}", re.IGNORECASE)
    for name in ("surface", "base", "gravel")
}


def _inches(value: str) -> float | int:
    f = float(value)
    return int(f) if f.is_integer() else f


def _layers(text: str) -> dict[str, float]:
    out = {}
    for name, pattern in _LAYER_RES.items():
        m = pattern.search(text)
        out[name] = _inches(m.group(1)) if m else 0
    return out


def parse_bpp_item(text: object) -> ParsedItem | None:
    """Street, subsection and dimensions of a ``<street> - BPP ...`` row; ``None`` when either is missing."""
    street = extract_street_name(text)
    subsection = bpp_subsection(text)
    if not street or not subsection:
        return None
    parsed = ParsedItem(type=SUBSECTION_TAGS[subsection], subsection=subsection, street=street, group_key=street)

    if subsection in ("Concrete sidewalk", "Concrete driveway"):
        m = _THICK_RE.search(text)
        if m:
            t = _inches(m.group(1))
            return parsed.with_(height=t / 12, height_formula=f"{format_number(t)}/12")
        return parsed
    if subsection == "Concrete curb":
        w = _CURB_WIDTH_RE.search(text)
        h = _CURB_HEIGHT_RE.search(text)
        if not w or not h:
            return parsed
        width = _inches(w.group(1))
        return parsed.with_(
            width=width / 12,
            width_formula=f"{format_number(width)}/12",
            height=int(h.group(1)) + int(h.group(2)) / 12,
        )
    if subsection == "Full depth asphalt pavement":
        layers = _layers(text)
        return parsed.with_(
            height=(layers["surface"] + layers["base"]) / 12,
            height_formula=f"({format_number(layers['surface'])}+{format_number(layers['base'])})/12",
            extra=layers,
        )
    return parsed


def manual_bpp_item(tag: str, subsection: str, street: str, inches: int) -> ParsedItem:
    """Parsed record for a manual-entry row (gravel, road base) whose takeoff is filled in by hand."""
    return ParsedItem(
        type=tag,
        subsection=subsection,
        street=street,
        group_key=street,
        height=inches / 12,
        height_formula=f"{inches}/12",
    )
