from __future__ import annotations

from ..models.items import ParsedItem

__all__ = [
    "DEMO_SUB_SUBSECTIONS",
    "ITEM_TYPES",
    "DEMO_DEFAULTS",
    "tag_for",
    "default_unit",
    "parse_civil_demo_item",
]

DEMO_SUB_SUBSECTIONS = (
    "Demo asphalt",
    "Demo curb",
    "Demo fence",
    "Demo wall",
    "Demo pipe",
    "Demo rail",
    "Demo sign",
    "Demo manhole",
    "Demo fire hydrant",
    "Demo utility pole",
    "Demo valve",
    "Demo inlet",
)

ITEM_TYPES = frozenset("civil_" + name.lower().replace(" ", "_") for name in DEMO_SUB_SUBSECTIONS)

# sub-subsection -> (width, height, unit) used when the row carries no dimensions
DEMO_DEFAULTS: dict[str, tuple[float | None, float | None, str]] = {
    "Demo asphalt": (None, 0.25, "SQ FT"),
    "Demo curb": (0.67, 1.5, "FT"),
    "Demo fence": (None, 6, "FT"),
    "Demo wall": (1.5, 3.5, "FT"),
    "Demo pipe": (None, None, "FT"),
    "Demo rail": (None, None, "FT"),
}


def tag_for(sub_subsection: str) -> str:
    return "civil_" + sub_subsection.lower().replace(" ", "_")


def parse_civil_demo_item(text: str, sub_subsection: str) -> ParsedItem:
    width, height, _ = DEMO_DEFAULTS.get(sub_subsection, (None, None, "EA"))
    return ParsedItem(type=tag_for(sub_subsection), subsection=sub_subsection, width=width, height=height)


def default_unit(sub_subsection: str) -> str:
    return DEMO_DEFAULTS.get(sub_subsection, (None, None, "EA"))[2]
