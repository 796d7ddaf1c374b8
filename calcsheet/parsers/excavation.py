from __future__ import annotations

import re

from ..classifiers.excavation import MUD_SLAB_RE
from ..models.items import ParsedItem
from .dimensions import extract_dimensions, parse_dimension

__all__ = [
    "EXCAVATION_TYPES",
    "EXTRA_TAGS",
    "ITEM_TYPES",
    "ROCK_ITEM_TYPES",
    "excavation_item_type",
    "extract_height_from_h",
    "extract_mud_slab_height",
    "parse_excavation_item",
]

EXCAVATION_TYPES = frozenset({
    "underground_piping",
    "sf",
    "wf",
    "st",
    "heel_block",
    "pc",
    "f",
    "exc",
    "slope_exc",
    "exc_backfill",
    "backfill",
    "mud_slab",
    "sewage_pit_slab",
    "concrete_pier",
    "rock_exc",
    "sump_pit",
    "other",
})

EXTRA_TAGS = (
    "soil_exc_extra_sqft",
    "soil_exc_extra_ft",
    "soil_exc_extra_ea",
    "backfill_extra_sqft",
    "backfill_extra_ft",
    "backfill_extra_ea",
)

ITEM_TYPES = EXCAVATION_TYPES | frozenset(EXTRA_TAGS)

ROCK_ITEM_TYPES = frozenset({
    "concrete_pier",
    "sewage_pit_slab",
    "rock_exc",
    "sump_pit",
    "line_drilling",
    "other",
    "rock_exc_extra_sqft",
    "rock_exc_extra_ft",
    "rock_exc_extra_ea",
})

_H_RE = re.compile(r"H=([^)]+)")


def extract_height_from_h(text: object) -> float:
    if not isinstance(text, str):
        return 0.0
    m = _H_RE.search(text)
    return parse_dimension(m.group(1)) if m else 0.0


def extract_mud_slab_height(text: object) -> float:
    if not isinstance(text, str):
        return 0.0
    m = MUD_SLAB_RE.search(text)
    return float(m.group(1)) / 12 if m else 0.0


def _is_exc(lower: str) -> bool:
    return re.search(r"^exc\s*\(h=", lower) is not None


def _is_slope(lower: str) -> bool:
    return "slope exc" in lower or "slope excavation" in lower


def _is_exc_backfill(lower: str) -> bool:
    return "exc & backfill" in lower or "excavation & backfill" in lower


def _is_backfill(lower: str) -> bool:
    return re.search(r"^backfill\s*\(h=", lower) is not None


_EARTHWORK_CHECKS = (
    (_is_exc, "exc"),
    (_is_slope, "slope_exc"),
    (_is_exc_backfill, "exc_backfill"),
    (_is_backfill, "backfill"),
)


def excavation_item_type(text: str, subsection: str = "excavation") -> str:
    """Category tag of an earthwork item. Order matters: footing prefixes win
    over the generic ``exc``/``backfill`` notations, and those win over mud slab
    only inside the excavation and backfill subsections."""
    lower = text.lower()
    if "underground piping" in lower:
        return "underground_piping"
    for pattern, tag in ((r"^sf\s*\(", "sf"), (r"^wf-\d+\s*\(", "wf"), (r"^st-\d+\s*\(", "st")):
        if re.search(pattern, lower):
            return tag
    if "heel block" in lower:
        return "heel_block"
    if re.search(r"^pc-\d+\s*\(", lower):
        return "pc"
    if re.search(r"^f-\d+\s*\(", lower):
        return "f"

    if subsection in ("excavation", "backfill"):
        for check, tag in _EARTHWORK_CHECKS:
            if check(lower):
                return tag
    if MUD_SLAB_RE.search(lower):
        return "mud_slab"
    for check, tag in _EARTHWORK_CHECKS:
        if check(lower):
            return tag

    if "duplex sewage ejector pit slab" in lower:
        return "sewage_pit_slab"
    if "concrete pier" in lower:
        return "concrete_pier"
    if lower.startswith("rock excavation"):
        return "rock_exc"
    if lower == "sump pit":
        return "sump_pit"
    return "other"


def parse_excavation_item(text: str, total: float, unit: str, item_type: str, subsection: str = "excavation") -> ParsedItem:
    """Dimensions for one earthwork row.

    Heights left at 0 are entered by hand on the sheet (footings, piers and
    sewage pit slabs).
    """
    length = width = height = 0.0
    if item_type == "underground_piping":
        width = 3.0
        height = 2.0 if subsection == "backfill" else 2.5
    elif item_type in ("sf", "wf", "st"):
        dims = extract_dimensions(text)
        if dims.get("length") and dims.get("width"):
            width = dims["length"]
        else:
            width = dims.get("width") or dims.get("length") or 0.0
    elif item_type in ("heel_block", "pc", "f", "concrete_pier"):
        dims = extract_dimensions(text)
        length = dims.get("length") or 0.0
        width = dims.get("width") or 0.0
    elif item_type in ("slope_exc", "exc_backfill", "exc", "backfill", "rock_exc", "line_drilling"):
        height = extract_height_from_h(text)
    elif item_type == "mud_slab":
        height = extract_mud_slab_height(text)
    elif item_type != "sewage_pit_slab":
        dims = extract_dimensions(text)
        length = dims.get("length") or 0.0
        width = dims.get("width") or 0.0
        height = dims.get("height") or 0.0

    return ParsedItem(
        type=item_type,
        subsection=subsection,
        length=length,
        width=width,
        height=height,
        qty=total if unit == "EA" else 0.0,
    )
