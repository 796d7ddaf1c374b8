from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from ..classifiers import waterproofing as c
from ..classifiers.base import Classifier
from ..models.items import Item, ParsedItem
from ..parsers import waterproofing as p
from .columns import RawLine
from .common import collect_items, estimate_allows, simple_item
from .grouping import merge_singletons_flat
from .tracker import RowClaimTracker

"""Waterproofing processors.

Only rows whose Estimate cell is blank or reads ``Waterproofing`` are
considered. Pit walls are listed twice, once on the exterior side (with the
membrane lap) and once on the negative side.
"""

__all__ = [
    "WATERPROOFING_SUBSECTIONS",
    "process_exterior_side_items",
    "process_exterior_side_pit_items",
    "process_negative_side_wall_items",
    "process_negative_side_slab_items",
    "process_waterproofing_items",
]

logger = logging.getLogger(__name__)

WATERPROOFING_SUBSECTIONS = ("Exterior side", "Negative side", "Horizontal")


def _allowed(line: RawLine) -> bool:
    return estimate_allows(line, "Waterproofing")


def _collect(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None,
    predicate: Classifier,
    parse: Callable[[str], ParsedItem],
    default_unit: str | None = None,
) -> list[Item]:
    def build(line: RawLine) -> Item:
        unit = line.unit_text or default_unit
        return simple_item(line, parse(line.text), unit=unit).with_(takeoff=line.total_or_blank)

    return collect_items(rows, headers, predicate, build, tracker=tracker, line_filter=_allowed)


def _key(item: Item) -> str:
    return item.parsed.group_key or "OTHER"


def process_exterior_side_items(rows, headers, tracker: RowClaimTracker | None = None) -> list[Item]:
    items = _collect(rows, headers, tracker, c.is_exterior_side_item, p.parse_exterior_side)
    return merge_singletons_flat(items, _key)


def process_exterior_side_pit_items(rows, headers, tracker: RowClaimTracker | None = None) -> list[Item]:
    return _collect(rows, headers, tracker, c.is_exterior_side_pit_item, p.parse_exterior_side_pit)


def process_negative_side_wall_items(rows, headers, tracker: RowClaimTracker | None = None) -> list[Item]:
    return _collect(rows, headers, tracker, c.is_negative_side_wall_item, p.parse_negative_side_wall, "FT")


def process_negative_side_slab_items(rows, headers, tracker: RowClaimTracker | None = None) -> list[Item]:
    items = _collect(rows, headers, tracker, c.is_negative_side_slab_item, p.parse_negative_side_slab, "SQ FT")
    return merge_singletons_flat(items, _key)


def process_waterproofing_items(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None = None,
) -> dict[str, list[Item]]:
    """Waterproofing items keyed by template subsection.

    ``Exterior side`` lists walls followed by pit walls, ``Negative side``
    the pit walls and ``Horizontal`` the pit slabs.
    """
    out = {
        "Exterior side": [
            *process_exterior_side_items(rows, headers, tracker),
            *process_exterior_side_pit_items(rows, headers, tracker),
        ],
        "Negative side": process_negative_side_wall_items(rows, headers, tracker),
        "Horizontal": process_negative_side_slab_items(rows, headers, tracker),
    }
    logger.debug(f"waterproofing items: { {k: len(v) for k, v in out.items() if v} }")
    return out
