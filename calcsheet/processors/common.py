from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from ..classifiers.base import Classifier
from ..models.items import Item, ParsedItem
from .columns import ColumnMap, RawLine, iter_lines, resolve_columns
from .tracker import RowClaimTracker

__all__ = [
    "ItemBuilder",
    "collect_items",
    "simple_item",
    "estimate_allows",
]

ItemBuilder = Callable[[RawLine], "Item | None"]


def simple_item(line: RawLine, parsed: ParsedItem, *, unit: str | None = None, read_count: bool = False) -> Item:
    return Item(
        particulars=line.text,
        takeoff=line.total,
        unit=line.unit_text if unit is None else unit,
        parsed=parsed,
        raw_row_number=line.raw_row_number,
        qty=line.count if read_count else "",
        weight=parsed.weight,
    )


def estimate_allows(line: RawLine, *names: str) -> bool:
    """True when the Estimate cell is blank or names one of ``names``."""
    est = line.estimate_text
    return not est or est in names


def collect_items(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    predicate: Classifier,
    build: ItemBuilder,
    *,
    tracker: RowClaimTracker | None = None,
    skip_claimed: bool = False,
    line_filter: Callable[[RawLine], bool] | None = None,
) -> list[Item]:
    """Classify each row and build items for the matches.

    Missing required columns yield an empty list. Every built item's row is
    marked on ``tracker``; with ``skip_claimed`` rows already marked are ignored.
    """
    cols: ColumnMap | None = resolve_columns(headers)
    if cols is None:
        return []
    items: list[Item] = []
    for line in iter_lines(rows, cols):
        if skip_claimed and tracker is not None and tracker.is_used(line.index):
            continue
        if line_filter is not None and not line_filter(line):
            continue
        if not predicate(line.text):
            continue
        item = build(line)
        if item is None:
            continue
        items.append(item)
        if tracker is not None:
            tracker.mark_used(line.index)
    return items
