from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..classifiers.superstructure import is_superstructure_item
from ..models.items import Group, Item
from ..parsers.dimensions import normalize_unit
from ..parsers.superstructure import parse_superstructure_item, unit_for
from .columns import RawLine
from .common import collect_items, estimate_allows
from .grouping import group_in_order
from .tracker import RowClaimTracker

__all__ = [
    "SUPERSTRUCTURE_SUBSECTIONS",
    "group_builtup_ramps",
    "process_superstructure_items",
]

logger = logging.getLogger(__name__)

SUPERSTRUCTURE_SUBSECTIONS = (
    "CIP Slabs",
    "Balcony slab",
    "Terrace slab",
    "Patch slab",
    "Slab steps",
    "LW concrete fill",
    "Slab on metal deck",
    "Topping slab",
    "Thermal break",
    "Raised slab",
    "Built-up slab",
    "Builtup ramps",
    "Built-up stair",
    "Concrete hanger",
    "Shear Walls",
    "Parapet walls",
    "Columns",
    "Concrete post",
    "Concrete encasement",
    "Drop panel",
    "Beams",
    "CIP Stairs",
    "Stairs – Infilled tads",
    "Curbs",
    "Concrete pad",
    "Non-shrink grout",
    "Repair scope",
)


def _build(line: RawLine) -> Item | None:
    parsed = parse_superstructure_item(line.text)
    if parsed is None:
        return None
    if parsed.type in ("somd", "infilled_landing"):
        unit = "SQ FT"
    else:
        unit = unit_for(parsed.type, normalize_unit(line.unit))
    return Item(
        particulars=line.text,
        takeoff=line.total_or_blank,
        unit=unit,
        parsed=parsed,
        raw_row_number=line.raw_row_number,
        qty=parsed.qty if parsed.qty is not None else "",
        item_type=parsed.type,
    )


def _allowed(line: RawLine) -> bool:
    return estimate_allows(line, "Superstructure")


def group_builtup_ramps(items: Sequence[Item]) -> list[Group]:
    """One group per trailing ``(n)`` id, knee walls ahead of the ramp slab."""
    by_id: dict[int, list[Item]] = {}
    for item in items:
        by_id.setdefault(item.parsed.extra.get("group_id", 1), []).append(item)
    groups = []
    for group_id in sorted(by_id):
        members = sorted(by_id[group_id], key=lambda i: i.parsed.type != "builtup_ramps_knee_wall")
        groups.append(Group(group_key=f"ramp_{group_id}", items=tuple(members), parsed=members[0].parsed, label=str(group_id)))
    return groups


def process_superstructure_items(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None = None,
) -> dict[str, list[Group]]:
    """Superstructure groups keyed by template subsection.

    Inside a subsection items group by group key in order of first
    appearance. The first built-up knee wall documents the built-up slab;
    every later one belongs to the built-up stair.
    """
    by_subsection: dict[str, list[Item]] = {name: [] for name in SUPERSTRUCTURE_SUBSECTIONS}
    seen_built_up_knee_wall = False
    for item in collect_items(rows, headers, is_superstructure_item, _build, tracker=tracker, line_filter=_allowed):
        subsection = item.parsed.subsection
        if item.parsed.type == "built_up_knee_wall":
            if seen_built_up_knee_wall:
                subsection = "Built-up stair"
                item = item.with_(parsed=item.parsed.with_(subsection=subsection))
            seen_built_up_knee_wall = True
        by_subsection[subsection].append(item)

    out: dict[str, list[Group]] = {}
    for name, items in by_subsection.items():
        if name == "Builtup ramps":
            out[name] = group_builtup_ramps(items)
        else:
            out[name] = group_in_order(items, lambda i: i.parsed.group_key or "OTHER")
    logger.debug(f"superstructure groups: { {k: len(v) for k, v in out.items() if v} }")
    return out
