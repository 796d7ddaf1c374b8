from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.items import Item
from ..models.sheet import CellFormulas
from ..parsers.excavation import ITEM_TYPES, ROCK_ITEM_TYPES
from .registry import table_for

"""Earthwork formulas.

Excavation quantities land in K (bank CY) and L (1.3 x CY swell); backfill
and mud slab quantities go straight to L. Column H is entered by hand for
footing and pier rows, the formulas reference it regardless.
"""

__all__ = [
    "TABLE",
    "ROCK_TABLE",
    "generate_excavation_formulas",
    "generate_rock_excavation_formulas",
]

TABLE = table_for("excavation")
ROCK_TABLE = table_for("rock_excavation")


def _is_backfill(item: Item | None) -> bool:
    return item is not None and item.parsed.subsection == "backfill"


def _volume(r: int, sq_ft: str, backfill: bool) -> CellFormulas:
    if backfill:
        return CellFormulas(sq_ft=sq_ft, cy=f"J{r}*H{r}/27")
    return CellFormulas(sq_ft=sq_ft, lbs=f"J{r}*H{r}/27", cy=f"K{r}*1.3")


@TABLE.register("underground_piping")
def _piping(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return _volume(r, f"C{r}*G{r}", _is_backfill(item))


@TABLE.register("sf", "wf", "st")
def _footing_strip(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return _volume(r, f"C{r}*G{r}", False)


@TABLE.register("heel_block", "pc", "f")
def _footing_block(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    if item is None or item.unit != "EA":
        return CellFormulas()
    return _volume(r, f"F{r}*G{r}*C{r}", False)


@TABLE.register("slope_exc", "exc_backfill", "exc", "backfill")
def _earthwork(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return _volume(r, f"C{r}", _is_backfill(item))


@TABLE.register("mud_slab")
def _mud_slab(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(sq_ft=f"C{r}*1.2", cy=f"J{r}*H{r}/27")


@TABLE.register("sewage_pit_slab")
def _sewage_pit_slab(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return _volume(r, f"C{r}", False)


@TABLE.register("concrete_pier", "rock_exc", "sump_pit", "other")
def _default(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    formulas = CellFormulas()
    if item is None:
        return formulas
    if item.unit in ("SQ FT", "SF"):
        formulas.sq_ft = f"C{r}"
    if (item.parsed.height or 0) > 0:
        formulas.lbs = f"J{r}*H{r}/27"
        formulas.cy = f"K{r}*1.3"
    return formulas


_EXTRA_SQ_FT = {
    "sqft": "C{r}",
    "ft": "C{r}*G{r}",
    "ea": "C{r}*F{r}*G{r}",
}


def _extra_sq_ft(tag: str, r: int) -> str:
    return _EXTRA_SQ_FT[tag.rsplit("_", 1)[1]].format(r=r)


@TABLE.register("soil_exc_extra_sqft", "soil_exc_extra_ft", "soil_exc_extra_ea")
def _soil_extra(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(sq_ft=_extra_sq_ft(refs["tag"], r), lbs=f"J{r}*H{r}/27", cy=f"K{r}*1.3")


def _volume_extra(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    tag = refs["tag"]
    formulas = CellFormulas(sq_ft=_extra_sq_ft(tag, r), cy=f"J{r}*H{r}/27")
    if tag.endswith("_ea"):
        formulas.qty_final = f"C{r}"
    return formulas


TABLE.register("backfill_extra_sqft", "backfill_extra_ft", "backfill_extra_ea")(_volume_extra)
TABLE.validate(ITEM_TYPES)


@ROCK_TABLE.register("concrete_pier")
def _rock_pier(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(sq_ft=f"C{r}*F{r}*G{r}", cy=f"J{r}*H{r}/27")


@ROCK_TABLE.register("sewage_pit_slab", "rock_exc")
def _rock_area(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(sq_ft=f"C{r}", cy=f"J{r}*H{r}/27")


@ROCK_TABLE.register("sump_pit")
def _rock_sump_pit(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(sq_ft=f"16*C{r}", cy=f"1.3*C{r}")


@ROCK_TABLE.register("line_drilling")
def _line_drilling(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(qty=f"ROUNDUP(H{r}/2,0)", ft=f"E{r}*C{r}")


@ROCK_TABLE.register("other")
def _rock_other(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas()


ROCK_TABLE.register("rock_exc_extra_sqft", "rock_exc_extra_ft", "rock_exc_extra_ea")(_volume_extra)
ROCK_TABLE.validate(ROCK_ITEM_TYPES)


def generate_excavation_formulas(item_type: str, row: int, item: Item | None = None) -> CellFormulas:
    return TABLE.generate(item_type, row, item, {"tag": item_type})


def generate_rock_excavation_formulas(item_type: str, row: int, item: Item | None = None) -> CellFormulas:
    return ROCK_TABLE.generate(item_type, row, item, {"tag": item_type})
