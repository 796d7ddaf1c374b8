from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..classifiers.bpp import BPP_ESTIMATE, has_bpp_street, is_bpp_alternate_item
from ..models.items import Item
from ..parsers.bpp import SUBSECTION_TAGS, parse_bpp_item
from .columns import RawLine
from .common import collect_items
from .tracker import RowClaimTracker

__all__ = [
    "BPP_ITEM_SUBSECTIONS",
    "process_bpp_alternate_items",
]

logger = logging.getLogger(__name__)

BPP_ITEM_SUBSECTIONS = tuple(SUBSECTION_TAGS)

_FT_SUBSECTIONS = ("Concrete curb", "Expansion joint")


def _allowed(line: RawLine) -> bool:
    if line.estimate_text == BPP_ESTIMATE:
        return True
    return is_bpp_alternate_item(line.text)


def _build(line: RawLine) -> Item | None:
    parsed = parse_bpp_item(line.text)
    if parsed is None:
        return None
    unit = line.unit_text or ("FT" if parsed.subsection in _FT_SUBSECTIONS else "SQ FT")
    return Item(
        particulars=line.text,
        takeoff=line.total_or_blank,
        unit=unit,
        parsed=parsed,
        raw_row_number=line.raw_row_number,
        item_type=parsed.type,
    )


def process_bpp_alternate_items(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None = None,
) -> dict[str, dict[str, list[Item]]]:
    """Items keyed by street (order of first appearance), then by subsection."""
    by_street: dict[str, dict[str, list[Item]]] = {}
    for item in collect_items(rows, headers, has_bpp_street, _build, tracker=tracker, line_filter=_allowed):
        street = by_street.setdefault(item.parsed.street, {name: [] for name in BPP_ITEM_SUBSECTIONS})
        street[item.parsed.subsection].append(item)
    logger.debug(f"bpp streets: {list(by_street)}")
    return by_street
