from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.items import Item
from ..models.sheet import CellFormulas
from ..parsers.demolition import ITEM_TYPES
from .registry import table_for

__all__ = [
    "TABLE",
    "generate_demolition_formulas",
]

TABLE = table_for("demolition")


@TABLE.register("demo_sog", "demo_rog", "demo_stair", "demo_extra_sqft")
def _slab(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(sq_ft=f"C{r}", cy=f"J{r}*H{r}/27")


@TABLE.register("demo_sf", "demo_fw", "demo_rw", "demo_extra_ft")
def _linear(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(sq_ft=f"C{r}*G{r}", cy=f"J{r}*H{r}/27")


@TABLE.register("demo_isolated_footing", "demo_extra_ea")
def _footing(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(sq_ft=f"F{r}*G{r}*C{r}", cy=f"J{r}*H{r}/27", qty_final=f"C{r}")


TABLE.validate(ITEM_TYPES)


def generate_demolition_formulas(item_type: str, row: int, item: Item | None = None) -> CellFormulas:
    return TABLE.generate(item_type, row, item)
