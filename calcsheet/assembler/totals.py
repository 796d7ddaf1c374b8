from __future__ import annotations

import math
from collections.abc import Iterable

from ..models.items import Item
from ..models.sheet import RockExcavationTotals
from .sections import LINE_DRILL_REF_TYPES

"""Numeric rock excavation and line drill totals.

These mirror the arithmetic of the rock excavation formulas so a caller can
use the totals without evaluating the sheet.
"""

__all__ = [
    "rock_item_quantities",
    "rock_excavation_totals",
    "lifts",
    "line_drill_label_ft",
    "line_drill_total_ft",
]


def _dims(item: Item) -> tuple[float, float, float, float]:
    p = item.parsed
    return item.takeoff_value, p.length or 0.0, p.width or 0.0, p.height or 0.0


def rock_item_quantities(item: Item) -> tuple[float, float]:
    """(SQ FT, CY) of one rock excavation row."""
    c, f, g, h = _dims(item)
    kind = item.item_type or item.parsed.type
    if kind == "sump_pit":
        return 16 * c, 1.3 * c
    if kind == "concrete_pier":
        sq_ft = c * f * g
    elif kind in ("rock_exc", "sewage_pit_slab"):
        sq_ft = c
    else:
        return 0.0, 0.0
    return sq_ft, sq_ft * h / 27


def rock_excavation_totals(items: Iterable[Item]) -> RockExcavationTotals:
    total_sq_ft = 0.0
    total_cy = 0.0
    for item in items:
        sq_ft, cy = rock_item_quantities(item)
        total_sq_ft += sq_ft
        total_cy += cy
    return RockExcavationTotals(total_sq_ft=total_sq_ft, total_cy=total_cy)


def lifts(height: float) -> int:
    # 2 ft drilling lifts, rounded up
    return math.ceil(height / 2) if height > 0 else 0


def line_drill_label_ft(item: Item) -> float:
    """FT of the line drill label row mirroring rock item ``item``."""
    c, f, g, h = _dims(item)
    kind = item.item_type or item.parsed.type
    if kind == "sump_pit":
        return c * 8
    if kind == "concrete_pier":
        perimeter = (g + f) * 2 * c
    else:
        perimeter = math.sqrt(c) * 4 if c > 0 else 0.0
    return lifts(h) * perimeter


def line_drill_total_ft(rock_items: Iterable[Item], line_drill: Iterable[Item]) -> float:
    """Both faces: twice the drilled length of the label rows and line drilling items.

    Zero when there are no line drilling items, since the line drill block is
    not emitted then.
    """
    drilled = [lifts(i.parsed.height or 0.0) * i.takeoff_value for i in line_drill]
    if not drilled:
        return 0.0
    labels = [line_drill_label_ft(i) for i in rock_items if (i.item_type or i.parsed.type) in LINE_DRILL_REF_TYPES]
    return (sum(labels) + sum(drilled)) * 2
