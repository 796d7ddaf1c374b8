from __future__ import annotations

from ..models.items import Item, ParsedItem

__all__ = [
    "TRENCH_WIDTH",
    "TRENCHING_LAYERS",
    "ITEM_TYPES",
    "trenching_items",
]

TRENCH_WIDTH = 2.5

# layer name -> height in feet; Demo is measured by hand
TRENCHING_LAYERS: tuple[tuple[str, float | None], ...] = (
    ("Demo", None),
    ("Excavation", 2.5),
    ("Backfill", 1.67),
    ("Gravel", 0.5),
    ("Patchback", 0.33),
)

ITEM_TYPES = frozenset({"trenching_item"})


def trenching_items() -> list[Item]:
    """The fixed trench layers, top to bottom."""
    return [
        Item(
            particulars=name,
            takeoff="",
            unit="SQ FT",
            parsed=ParsedItem(type="trenching_item", subsection="Trenching", width=TRENCH_WIDTH, height=height),
            raw_row_number=0,
        )
        for name, height in TRENCHING_LAYERS
    ]
