from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from ..classifiers.base import Classifier
from ..classifiers.excavation import (
    is_backfill_item,
    is_excavation_item,
    is_line_drill_item,
    is_mud_slab_item,
    is_rock_excavation_item,
)
from ..models.items import Item, ParsedItem
from ..parsers.excavation import excavation_item_type, parse_excavation_item
from .columns import RawLine
from .common import collect_items
from .tracker import RowClaimTracker

__all__ = [
    "process_excavation_items",
    "process_backfill_items",
    "process_mud_slab_items",
    "process_rock_excavation_items",
    "process_line_drill_items",
    "SUMP_PIT_ITEM_ID",
]

logger = logging.getLogger(__name__)

SUMP_PIT_ITEM_ID = "rock_exc_sump_pit_manual"


def _builder(subsection: str, *, type_context: str | None = None) -> Callable[[RawLine], Item]:
    context = type_context or subsection

    def build(line: RawLine) -> Item:
        item_type = excavation_item_type(line.text, context)
        parsed = parse_excavation_item(line.text, line.total, line.unit_text, item_type, context)
        return Item(
            particulars=line.text,
            takeoff=line.total,
            unit=line.unit_text,
            parsed=parsed.with_(subsection=subsection),
            raw_row_number=line.raw_row_number,
            item_type=item_type,
        )

    return build


def _aggregate_sewage_slabs(items: Sequence[Item]) -> list[Item]:
    """Repeated sewage pit slab rows with the same text fold into the first one."""
    out: list[Item] = []
    for item in items:
        if item.item_type == "sewage_pit_slab":
            for idx, existing in enumerate(out):
                if existing.item_type == "sewage_pit_slab" and existing.particulars == item.particulars:
                    out[idx] = existing.with_(takeoff=existing.takeoff_value + item.takeoff_value)
                    break
            else:
                out.append(item)
        else:
            out.append(item)
    return out


def _process(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    predicate: Classifier,
    subsection: str,
    tracker: RowClaimTracker | None,
) -> list[Item]:
    items = collect_items(rows, headers, predicate, _builder(subsection), tracker=tracker)
    logger.debug(f"{subsection} items: {len(items)}")
    return items


def process_excavation_items(rows: Sequence[Sequence[Any]], headers: Sequence[Any], tracker: RowClaimTracker | None = None) -> list[Item]:
    return _aggregate_sewage_slabs(_process(rows, headers, is_excavation_item, "excavation", tracker))


def process_backfill_items(rows: Sequence[Sequence[Any]], headers: Sequence[Any], tracker: RowClaimTracker | None = None) -> list[Item]:
    return _process(rows, headers, is_backfill_item, "backfill", tracker)


def process_mud_slab_items(rows: Sequence[Sequence[Any]], headers: Sequence[Any], tracker: RowClaimTracker | None = None) -> list[Item]:
    return _process(rows, headers, is_mud_slab_item, "mud_slab", tracker)


def _manual_sump_pit() -> Item:
    return Item(
        particulars="Sump pit",
        takeoff=2.0,
        unit="EA",
        parsed=ParsedItem(type="sump_pit", subsection="rock_excavation", length=0.0, width=0.0, height=0.0),
        raw_row_number=0,
        item_id=SUMP_PIT_ITEM_ID,
        item_type="sump_pit",
    )


def process_rock_excavation_items(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None = None,
) -> list[Item]:
    """Rock excavation items plus the fixed manual ``Sump pit`` row.

    Line drill rows are left to :func:`process_line_drill_items`. Each item
    gets a stable id (``rock_exc_<type>_<n>``) so line drill labels can refer
    back to it.
    """
    found = collect_items(
        rows,
        headers,
        is_rock_excavation_item,
        _builder("rock_excavation"),
        tracker=tracker,
        line_filter=lambda line: not is_line_drill_item(line.text),
    )
    items: list[Item] = []
    for item in _aggregate_sewage_slabs(found):
        items.append(item.with_(item_id=f"rock_exc_{item.item_type}_{len(items)}"))
    items.append(_manual_sump_pit())
    logger.debug(f"rock excavation items: {len(items)}")
    return items


def _line_drill(line: RawLine) -> Item:
    parsed = parse_excavation_item(line.text, line.total, line.unit_text, "line_drilling", "rock_excavation")
    return Item(
        particulars=line.text,
        takeoff=line.total,
        unit=line.unit_text,
        parsed=parsed.with_(subsection="line_drill"),
        raw_row_number=line.raw_row_number,
        item_type="line_drilling",
    )


def process_line_drill_items(rows: Sequence[Sequence[Any]], headers: Sequence[Any], tracker: RowClaimTracker | None = None) -> list[Item]:
    return collect_items(rows, headers, is_line_drill_item, _line_drill, tracker=tracker)
