from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..classifiers.demolition import demolition_subsection, is_demolition_item
from ..models.items import Item
from ..parsers.demolition import DEMOLITION_TAGS, parse_demolition_item
from .columns import RawLine
from .common import collect_items, simple_item
from .grouping import merge_singletons_flat
from .tracker import RowClaimTracker

__all__ = [
    "process_demolition_items",
]

logger = logging.getLogger(__name__)


def _build(line: RawLine) -> Item | None:
    subsection = demolition_subsection(line.text)
    if subsection is None:
        return None
    return simple_item(line, parse_demolition_item(line.text, subsection))


def process_demolition_items(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None = None,
) -> dict[str, list[Item]]:
    """Demolition items bucketed by template subsection.

    Inside a subsection items are ordered by group key; when more than one
    group is a singleton those items move to the end relabelled ``MERGED``.
    """
    by_subsection: dict[str, list[Item]] = {name: [] for name in DEMOLITION_TAGS}
    for item in collect_items(rows, headers, is_demolition_item, _build, tracker=tracker):
        by_subsection[item.parsed.subsection].append(item)

    for name, items in by_subsection.items():
        if items:
            by_subsection[name] = merge_singletons_flat(items, key=lambda i: i.parsed.group_key or "DEFAULT")
    logger.debug(f"demolition items: { {k: len(v) for k, v in by_subsection.items() if v} }")
    return by_subsection
