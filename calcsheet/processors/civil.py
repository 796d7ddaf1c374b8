from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from ..classifiers import civil as c
from ..models.items import Group, Item
from ..parsers.civil import DEMO_SUB_SUBSECTIONS, default_unit, parse_civil_demo_item
from .columns import RawLine
from .common import collect_items
from .tracker import RowClaimTracker

__all__ = [
    "CIVIL_SUBSECTIONS",
    "DEMO_BUCKETS",
    "process_civil_demo_items",
]

logger = logging.getLogger(__name__)

CIVIL_SUBSECTIONS = (
    "Demo",
    "Excavation",
    "Gravel",
    "Concrete Pavement",
    "Asphalt",
    "Pads",
    "Soil Erosion",
    "Fence",
    "Concrete filled steel pipe bollard",
    "Site",
    "Ele",
    "Gas",
    "Water",
    "Drains & Utilities",
    "Alternate",
)

# sub-subsection -> (bucket of an item, bucket order)
DEMO_BUCKETS: dict[str, tuple[Callable[[object], str], tuple[str, ...]]] = {
    "Demo fence": (c.fence_type, ("chain_link_vinyl", "wood", "other")),
    "Demo pipe": (c.pipe_type, ("remove_pipe", "protect", "other")),
    "Demo sign": (c.sign_type, ("single_sign", "row_of_signs")),
    "Demo inlet": (c.inlet_type, ("protect", "remove", "other")),
}


def _allowed(line: RawLine) -> bool:
    return line.estimate_text == c.CIVIL_ESTIMATE or c.is_civil_demo_text(line.text)


def _build(line: RawLine) -> Item | None:
    sub_subsection = c.demo_sub_subsection(line.text)
    if sub_subsection is None:
        return None
    parsed = parse_civil_demo_item(line.text, sub_subsection)
    return Item(
        particulars=line.text,
        takeoff=line.total_or_blank,
        unit=line.unit_text or default_unit(sub_subsection),
        parsed=parsed,
        raw_row_number=line.raw_row_number,
        item_type=parsed.type,
    )


def _bucketed(name: str, items: list[Item]) -> list[Group]:
    if not items:
        return []
    if name not in DEMO_BUCKETS:
        return [Group(group_key=name, items=tuple(items), parsed=items[0].parsed)]
    bucket_of, order = DEMO_BUCKETS[name]
    buckets: dict[str, list[Item]] = {key: [] for key in order}
    for item in items:
        buckets[bucket_of(item.particulars)].append(item)
    return [Group(group_key=key, items=tuple(v), parsed=v[0].parsed, kind=key) for key, v in buckets.items() if v]


def process_civil_demo_items(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None = None,
) -> dict[str, list[Group]]:
    """Civil demolition groups keyed by Demo sub-subsection.

    Fences, pipes, signs and inlets split into fixed type buckets; every
    other sub-subsection is a single group.
    """
    by_name: dict[str, list[Item]] = {name: [] for name in DEMO_SUB_SUBSECTIONS}
    for item in collect_items(rows, headers, c.is_civil_demo_item, _build, tracker=tracker, line_filter=_allowed):
        by_name[item.parsed.subsection].append(item)
    out = {name: _bucketed(name, items) for name, items in by_name.items()}
    logger.debug(f"civil demo groups: { {k: len(v) for k, v in out.items() if v} }")
    return out
