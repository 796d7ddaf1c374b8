from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.items import Item
from ..models.sheet import CellFormulas
from ..parsers.dimensions import format_number, to_fixed
from ..parsers.soe import ITEM_TYPES
from .registry import table_for

__all__ = [
    "TABLE",
    "generate_soe_formulas",
]

TABLE = table_for("soe")


def _w(item: Item | None) -> str:
    return to_fixed(item.weight if item is not None else 0.0, 3)


@TABLE.register("hp", "drilled", "soldier_pile", "secondary_secant")
def _pile(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"H{r}*C{r}", lbs=f"I{r}*{_w(item)}", qty_final=f"C{r}")


@TABLE.register("primary_secant", "tangent")
def _concrete_pile(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"H{r}*C{r}", qty_final=f"C{r}")


@TABLE.register("sheet_pile")
def _sheet_pile(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"C{r}", sq_ft=f"I{r}*H{r}", lbs=f"J{r}*{_w(item)}")


@TABLE.register(
    "timber_lagging", "timber_sheeting", "vertical_timber_sheets", "horizontal_timber_sheets", "parging",
)
def _lagging(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"C{r}", sq_ft=f"I{r}*H{r}")


@TABLE.register("backpacking_item")
def _backpacking(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    lagging_sum = refs.get("timber_lagging_sum_row")
    return CellFormulas(takeoff=f"J{lagging_sum}" if lagging_sum else None, sq_ft=f"C{r}")


@TABLE.register("timber_soldier_pile", "timber_plank", "timber_brace", "timber_post")
def _timber_each(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"H{r}*C{r}", qty_final=f"C{r}")


@TABLE.register("timber_waler")
def _timber_waler(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"C{r}", qty_final=f"E{r}")


@TABLE.register("timber_raker")
def _timber_raker(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"C{r}*1.15", qty_final=f"E{r}")


@TABLE.register("timber_stringer")
def _timber_stringer(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"C{r}")


@TABLE.register("waler", "inner_corner_brace", "stand_off", "kicker")
def _waler(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"C{r}", lbs=f"I{r}*{_w(item)}", qty_final=f"E{r}")


@TABLE.register("raker", "upper_raker", "lower_raker")
def _raker(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    # sloped length allowance
    return CellFormulas(ft=f"C{r}*1.15", lbs=f"I{r}*{_w(item)}", qty_final=f"E{r}")


@TABLE.register("channel", "roll_chock", "stud_beam", "knee_brace")
def _member_each(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"C{r}*H{r}", lbs=f"I{r}*{_w(item)}", qty_final=f"C{r}")


@TABLE.register("supporting_angle")
def _supporting_angle(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"H{r}*E{r}*C{r}", lbs=f"I{r}*{_w(item)}", qty_final=f"C{r}*E{r}")


@TABLE.register("heel_block")
def _heel_block(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(sq_ft=f"C{r}*H{r}*G{r}", cy=f"J{r}*F{r}/27", qty_final=f"C{r}")


@TABLE.register("underpinning")
def _underpinning(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"F{r}*C{r}", sq_ft=f"C{r}*H{r}*G{r}", cy=f"J{r}*F{r}/27", qty_final=f"C{r}")


@TABLE.register("shims")
def _shims(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    underpinning_sum = refs.get("underpinning_sum_row")
    return CellFormulas(ft=f"I{underpinning_sum}" if underpinning_sum else None, sq_ft=f"I{r}*G{r}")


@TABLE.register("rock_anchor")
def _rock_anchor(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    formulas = CellFormulas(ft=f"F{r}*C{r}", qty_final=f"C{r}")
    if item is not None:
        formulas.length = item.parsed.calculated_height
    return formulas


@TABLE.register("rock_bolt")
def _rock_bolt(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    formulas = CellFormulas(ft=f"F{r}*E{r}", qty_final=f"E{r}")
    if item is not None:
        if item.parsed.oc_spacing:
            formulas.qty = f"ROUNDUP(C{r}/{format_number(item.parsed.oc_spacing)},0)+1"
        if item.parsed.bond_length is not None:
            formulas.length = f"{format_number(item.parsed.bond_length)}+5"
    return formulas


@TABLE.register("anchor", "tie_back")
def _anchor(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    formulas = CellFormulas(ft=f"H{r}*C{r}", qty_final=f"C{r}")
    if item is not None and item.parsed.calculated_height:
        formulas.height = item.parsed.calculated_height
    return formulas


@TABLE.register("concrete_soil_retention_pier", "button")
def _bracket_block(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    formulas = CellFormulas(sq_ft=f"C{r}*H{r}*G{r}", cy=f"J{r}*F{r}/27", qty_final=f"C{r}")
    if item is not None:
        formulas.length = item.parsed.length or None
        formulas.width = item.parsed.width or None
        formulas.height = item.parsed.height or None
    return formulas


@TABLE.register("guide_wall")
def _guide_wall(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    formulas = CellFormulas(ft=f"C{r}", sq_ft=f"I{r}*G{r}", cy=f"J{r}*H{r}/27")
    if item is not None:
        formulas.width = item.parsed.width_formula or item.parsed.width or None
        formulas.height = item.parsed.height_raw or None
    return formulas


@TABLE.register("dowel_bar", "rock_pin")
def _dowel(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    formulas = CellFormulas(ft=f"C{r}*E{r}*H{r}", qty_final=f"C{r}*E{r}")
    if item is not None:
        formulas.qty = 1 if item.parsed.type == "rock_pin" else (item.parsed.qty or None)
        formulas.height = item.parsed.height_raw or None
    return formulas


def _height(item: Item | None) -> float | None:
    return (item.parsed.height_raw or None) if item is not None else None


@TABLE.register("shotcrete")
def _shotcrete(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(height=_height(item), ft=f"C{r}", sq_ft=f"C{r}*H{r}", cy=f"J{r}*G{r}/27")


@TABLE.register("permission_grouting", "form_board")
def _grouting(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(height=_height(item), ft=f"C{r}", sq_ft=f"C{r}*H{r}")


@TABLE.register("rock_stabilization")
def _rock_stabilization(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(height=_height(item), sq_ft=f"C{r}", cy=f"J{r}*H{r}/27")


@TABLE.register("drilled_hole_grout")
def _drilled_hole_grout(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(height=_height(item), ft=f"H{r}*C{r}", qty_final=f"C{r}")


TABLE.validate(ITEM_TYPES)


def generate_soe_formulas(item_type: str, row: int, item: Item | None = None, refs: Mapping[str, Any] | None = None) -> CellFormulas:
    """Formulas for one SOE row; the parsed type wins over ``item_type``."""
    tag = item.parsed.type if item is not None and item.parsed.type else item_type
    return TABLE.generate(tag, row, item, refs)
