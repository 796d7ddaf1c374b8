from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.items import Item
from ..models.sheet import CellFormulas
from ..parsers.waterproofing import ITEM_TYPES
from .registry import table_for

__all__ = [
    "TABLE",
    "VOLUME_REF_KEYS",
    "generate_waterproofing_formulas",
]

TABLE = table_for("waterproofing")

# pit walls whose membrane area also carries a concrete volume
VOLUME_REF_KEYS = frozenset({"elevator_pit", "detention_tank"})


def _height(item: Item | None) -> Any:
    if item is None:
        return None
    return item.parsed.height


@TABLE.register("waterproofing_exterior_side")
def _exterior_side(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"C{r}", sq_ft=f"H{r}*I{r}", height=_height(item))


@TABLE.register("waterproofing_exterior_side_pit")
def _exterior_side_pit(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    formulas = CellFormulas(ft=f"C{r}", sq_ft=f"H{r}*I{r}", height=_height(item))
    if item is not None and item.parsed.ref_key in VOLUME_REF_KEYS:
        formulas.width = item.parsed.first_value_feet
        formulas.cy = f"J{r}*G{r}/27"
    return formulas


@TABLE.register("waterproofing_negative_side_wall")
def _negative_side_wall(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"C{r}", sq_ft=f"I{r}*H{r}", height=_height(item))


@TABLE.register("waterproofing_negative_side_slab")
def _negative_side_slab(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(sq_ft=f"C{r}")


TABLE.validate(ITEM_TYPES)


def generate_waterproofing_formulas(item_type: str, row: int, item: Item | None = None, refs: Mapping[str, Any] | None = None) -> CellFormulas:
    tag = item.parsed.type if item is not None and item.parsed.type else item_type
    return TABLE.generate(tag, row, item, refs)
