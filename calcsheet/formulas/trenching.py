from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.items import Item
from ..models.sheet import CellFormulas
from ..parsers.trenching import ITEM_TYPES
from .registry import table_for

__all__ = [
    "TABLE",
    "generate_trenching_formulas",
]

TABLE = table_for("trenching")


@TABLE.register("trenching_item")
def _layer(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    """Each layer after the first repeats the takeoff of the layer above it."""
    formulas = CellFormulas(ft=f"C{r}", sq_ft=f"I{r}*G{r}")
    above = refs.get("takeoff_ref_row")
    if above:
        formulas.takeoff = f"C{above}"
    if item is not None:
        formulas.width = item.parsed.width
        formulas.height = item.parsed.height
        if item.parsed.height:
            formulas.cy = f"J{r}*H{r}/27"
    return formulas


TABLE.validate(ITEM_TYPES)


def generate_trenching_formulas(row: int, item: Item | None = None, refs: Mapping[str, Any] | None = None) -> CellFormulas:
    return TABLE.generate("trenching_item", row, item, refs)
