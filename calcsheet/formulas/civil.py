from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.items import Item
from ..models.sheet import CellFormulas
from ..parsers.civil import ITEM_TYPES
from .registry import table_for

__all__ = [
    "TABLE",
    "generate_civil_formulas",
]

TABLE = table_for("civil")


def _dims(formulas: CellFormulas, item: Item | None) -> CellFormulas:
    if item is not None:
        formulas.width = item.parsed.width
        formulas.height = item.parsed.height
    return formulas


@TABLE.register("civil_demo_asphalt")
def _asphalt(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return _dims(CellFormulas(sq_ft=f"C{r}", cy=f"J{r}*H{r}/27"), item)


@TABLE.register("civil_demo_curb", "civil_demo_wall")
def _curb_or_wall(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return _dims(CellFormulas(ft=f"C{r}", sq_ft=f"I{r}*H{r}", cy=f"J{r}*G{r}/27"), item)


@TABLE.register("civil_demo_fence")
def _fence(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return _dims(CellFormulas(ft=f"C{r}", sq_ft=f"I{r}*H{r}"), item)


@TABLE.register("civil_demo_pipe", "civil_demo_rail")
def _linear(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"C{r}")


@TABLE.register(
    "civil_demo_sign",
    "civil_demo_manhole",
    "civil_demo_fire_hydrant",
    "civil_demo_utility_pole",
    "civil_demo_valve",
    "civil_demo_inlet",
)
def _each(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(qty_final=f"C{r}")


TABLE.validate(ITEM_TYPES)


def generate_civil_formulas(item_type: str, row: int, item: Item | None = None, refs: Mapping[str, Any] | None = None) -> CellFormulas:
    tag = item.parsed.type if item is not None and item.parsed.type else item_type
    return TABLE.generate(tag, row, item, refs)
