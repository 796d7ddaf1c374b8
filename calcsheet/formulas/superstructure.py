from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.items import Item
from ..models.sheet import CellFormulas
from ..parsers.dimensions import format_number
from ..parsers.superstructure import ITEM_TYPES, SLAB_TYPES
from .registry import table_for

"""Superstructure formulas.

Slabs carry the thickness in H (a literal or an ``8/12`` style expression),
walls, beams and curbs follow the linear wall pattern, and counted elements
(posts, hangers, encasements, drop panels) compute plan area times count.
"""

__all__ = [
    "TABLE",
    "generate_superstructure_formulas",
]

TABLE = table_for("superstructure")


def _value(item: Item | None, name: str) -> Any:
    if item is None:
        return None
    return getattr(item.parsed, name)


def _height(item: Item | None) -> Any:
    formula = _value(item, "height_formula")
    return formula if formula else _value(item, "height")


def _slab(r: int, height: Any) -> CellFormulas:
    return CellFormulas(sq_ft=f"C{r}", cy=f"J{r}*H{r}/27", height=height)


@TABLE.register(
    *SLAB_TYPES,
    "balcony",
    "terrace",
    "patch",
    "lw_concrete_fill",
    "topping_slab",
    "raised_slab",
    "built_up_slab",
    "builtup_ramp",
    "drop_panel_h",
    "infilled_landing",
)
def _flat_slab(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return _slab(r, _height(item))


@TABLE.register("somd")
def _slab_on_metal_deck(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    # topping over the deck plus half the flute depth
    height = None
    if item is not None and item.parsed.extra:
        topping = format_number(item.parsed.extra["topping_inches"])
        deck = format_number(item.parsed.extra["deck_inches"])
        height = f"({topping}+{deck}/2)/12"
    return _slab(r, height)


@TABLE.register(
    "slab_step",
    "raised_knee_wall",
    "built_up_knee_wall",
    "builtup_ramps_knee_wall",
    "shear_walls",
    "parapet_walls",
    "beams",
    "curbs",
)
def _linear(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    formulas = CellFormulas(
        ft=f"C{r}",
        sq_ft=f"I{r}*H{r}",
        cy=f"J{r}*G{r}/27",
        width=_value(item, "width"),
        height=_value(item, "height"),
    )
    if _value(item, "type") == "slab_step":
        formulas.qty = _value(item, "qty")
    return formulas


@TABLE.register("concrete_hanger", "concrete_post", "concrete_encasement", "drop_panel_bracket")
def _counted_block(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(
        sq_ft=f"C{r}*F{r}*G{r}",
        cy=f"J{r}*H{r}/27",
        qty_final=f"C{r}",
        length=_value(item, "length"),
        width=_value(item, "width"),
        height=_value(item, "height"),
    )


@TABLE.register("built_up_stairs")
def _built_up_stairs(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(
        length=_value(item, "length"),
        width=_value(item, "width_formula"),
        height=_value(item, "height_formula"),
        sq_ft=f"C{r}*F{r}*G{r}",
        cy=f"J{r}*H{r}/27",
        qty_final=f"C{r}",
    )


@TABLE.register("thermal_break")
def _thermal_break(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    qty = _value(item, "qty")
    if qty:
        return CellFormulas(qty=qty, ft=f"C{r}*E{r}")
    return CellFormulas(ft=f"C{r}")


@TABLE.register("concrete_pad", "concrete_pad_no_bracket")
def _concrete_pad(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    formulas = _slab(r, _height(item))
    qty = _value(item, "qty")
    if qty:
        formulas.qty = qty
        formulas.qty_final = f"E{r}"
    return formulas


@TABLE.register("columns_takeoff", "non_shrink_grout")
def _count(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(qty_final=f"C{r}")


@TABLE.register("repair_scope")
def _repair_scope(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    if item is not None and item.unit == "SQ FT":
        return CellFormulas(sq_ft=f"C{r}")
    return CellFormulas(ft=f"C{r}")


TABLE.validate(ITEM_TYPES)


def generate_superstructure_formulas(item_type: str, row: int, item: Item | None = None, refs: Mapping[str, Any] | None = None) -> CellFormulas:
    tag = item.parsed.type if item is not None and item.parsed.type else item_type
    return TABLE.generate(tag, row, item, refs)
