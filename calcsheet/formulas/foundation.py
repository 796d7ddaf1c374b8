from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.items import Item
from ..models.sheet import CellFormulas
from ..parsers.dimensions import to_fixed
from ..parsers.foundation import ITEM_TYPES
from .registry import table_for

"""Foundation formulas.

Column roles differ per family: footings and caps put the plan dimensions in
F/G and the depth in H, linear elements keep the width in G and the height
in H, and ST strip footings swap the two.
"""

__all__ = [
    "TABLE",
    "generate_foundation_formulas",
]

TABLE = table_for("foundation")


def _parsed_value(item: Item | None, name: str) -> Any:
    if item is None:
        return None
    return getattr(item.parsed, name)


def _nonzero(value: Any) -> Any:
    return value or None


def _wall(r: int, item: Item | None) -> CellFormulas:
    # G = width, H = height
    return CellFormulas(
        ft=f"C{r}",
        sq_ft=f"I{r}*H{r}",
        cy=f"J{r}*G{r}/27",
        width=_parsed_value(item, "width"),
        height=_parsed_value(item, "height"),
    )


def _slab(r: int, height: Any) -> CellFormulas:
    return CellFormulas(sq_ft=f"C{r}", cy=f"J{r}*H{r}/27", height=height)


@TABLE.register(
    "drilled_foundation_pile",
    "helical_foundation_pile",
    "driven_foundation_pile",
    "stelcor_drilled_displacement_pile",
)
def _pipe_pile(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    formulas = CellFormulas(ft=f"H{r}*C{r}", qty_final=f"C{r}")
    if item is None:
        return formulas
    parsed = item.parsed
    formulas.height = parsed.calculated_height or ""
    if parsed.is_dual_diameter:
        formulas.sq_ft = f"E{r}*C{r}"
        if parsed.weight and parsed.weight2:
            formulas.lbs = f"(I{r}*{to_fixed(parsed.weight, 3)})+(J{r}*{to_fixed(parsed.weight2, 3)})"
    elif parsed.weight:
        formulas.lbs = f"I{r}*{to_fixed(parsed.weight, 3)}"
    return formulas


@TABLE.register("cfa_pile")
def _cfa_pile(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    height = (item.parsed.calculated_height or "") if item is not None else None
    return CellFormulas(ft=f"H{r}*C{r}", qty_final=f"C{r}", height=height)


def _block_dims(formulas: CellFormulas, item: Item | None) -> CellFormulas:
    formulas.length = _nonzero(_parsed_value(item, "length"))
    formulas.width = _nonzero(_parsed_value(item, "width"))
    formulas.height = _nonzero(_parsed_value(item, "height"))
    return formulas


@TABLE.register("pile_cap", "pilaster")
def _cap(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return _block_dims(CellFormulas(sq_ft=f"C{r}*H{r}*G{r}", cy=f"J{r}*F{r}/27", qty_final=f"C{r}"), item)


@TABLE.register("isolated_footing", "pier")
def _footing(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return _block_dims(CellFormulas(sq_ft=f"C{r}*F{r}*G{r}", cy=f"J{r}*H{r}/27", qty_final=f"C{r}"), item)


@TABLE.register("strip_footing")
def _strip_footing(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    formulas = CellFormulas(
        ft=f"C{r}",
        width=_nonzero(_parsed_value(item, "width")),
        height=_nonzero(_parsed_value(item, "height")),
    )
    if _parsed_value(item, "item_sub_type") == "ST":
        formulas.sq_ft = f"H{r}*I{r}"
        formulas.cy = f"J{r}*G{r}/27"
    else:
        formulas.sq_ft = f"G{r}*I{r}"
        formulas.cy = f"J{r}*H{r}/27"
    return formulas


@TABLE.register("grade_beam", "tie_beam", "strap_beam", "thickened_slab")
def _beam(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(
        ft=f"C{r}",
        sq_ft=f"H{r}*I{r}",
        cy=f"J{r}*G{r}/27",
        width=_nonzero(_parsed_value(item, "width")),
        height=_nonzero(_parsed_value(item, "height")),
    )


@TABLE.register("corbel", "linear_wall", "foundation_wall", "retaining_wall", "barrier_wall", "stem_wall")
def _linear_wall(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    formulas = _wall(r, item)
    formulas.width = _nonzero(formulas.width)
    formulas.height = _nonzero(formulas.height)
    return formulas


@TABLE.register("buttress_takeoff")
def _buttress(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"H{r}*C{r}", sq_ft=f"C{r}*H{r}*G{r}", cy=f"J{r}*F{r}/27", qty_final=f"C{r}")


_PIT_SLABS = ("slab", "mat", "mat_slab", "lid_slab")
_PIT_WALLS = ("wall", "slope_transition")


@TABLE.register(
    "elevator_pit",
    "service_elevator_pit",
    "detention_tank",
    "duplex_sewage_ejector_pit",
    "deep_sewage_ejector_pit",
    "sump_pump_pit",
    "grease_trap",
    "house_trap",
)
def _pit(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    sub_type = _parsed_value(item, "item_sub_type")
    if sub_type == "sump_pit":
        return CellFormulas(sq_ft=f"16*C{r}", cy=f"C{r}*1.3", qty_final=f"C{r}")
    if sub_type in _PIT_SLABS:
        height = _parsed_value(item, "height_from_h")
        if height is None:
            height = _parsed_value(item, "height_from_name")
        return _slab(r, height)
    if sub_type in _PIT_WALLS:
        return _wall(r, item)
    return CellFormulas()


@TABLE.register("mat_slab")
def _mat_slab(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    sub_type = _parsed_value(item, "item_sub_type")
    if sub_type == "mat":
        return _slab(r, _parsed_value(item, "height_from_h"))
    if sub_type == "haunch":
        return _wall(r, item)
    return CellFormulas()


@TABLE.register("mud_slab_foundation")
def _mud_slab(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return _slab(r, None)


@TABLE.register("sog")
def _sog(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    sub_type = _parsed_value(item, "item_sub_type")
    if sub_type == "gravel":
        return _slab(r, None)
    if sub_type == "gravel_backfill":
        return _slab(r, _parsed_value(item, "height_from_h"))
    if sub_type == "geotextile":
        return CellFormulas(sq_ft=f"C{r}")
    if sub_type == "sog_step":
        return _wall(r, item)
    if sub_type == "sog_slab":
        return _slab(r, _parsed_value(item, "height_from_name"))
    return CellFormulas()


@TABLE.register("rog")
def _rog(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return _slab(r, _parsed_value(item, "height_from_name"))


@TABLE.register("stairs_on_grade")
def _stairs_on_grade(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    sub_type = _parsed_value(item, "item_sub_type")
    if sub_type == "stairs":
        # 11" tread, 7" riser
        return CellFormulas(
            length="11/12",
            height="7/12",
            width=_parsed_value(item, "width_from_name"),
            sq_ft=f"C{r}*G{r}*F{r}",
            cy=f"J{r}*H{r}/27",
            qty_final=f"C{r}",
        )
    if sub_type == "landings":
        return CellFormulas(height=0.67, sq_ft=f"C{r}", cy=f"J{r}*H{r}/27")
    if sub_type == "stair_slab":
        stairs_row = refs.get("stairs_row")
        formulas = CellFormulas(ft=f"C{r}", height=0.67, sq_ft=f"I{r}*H{r}")
        if stairs_row:
            formulas.takeoff = f"C{stairs_row}*1.3"
            formulas.width = f"G{stairs_row}"
        if refs.get("has_width_from_name"):
            formulas.cy = f"J{r}*G{r}/27"
        else:
            formulas.cy = f"J{r}*F{r}/27"
            if stairs_row:
                formulas.length = f"G{stairs_row}"
        return formulas
    return CellFormulas()


@TABLE.register("electric_conduit")
def _electric_conduit(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"C{r}")


@TABLE.register("foundation_extra_sqft")
def _extra_sqft(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(sq_ft=f"C{r}", cy=f"J{r}*H{r}/27")


@TABLE.register("foundation_extra_ft")
def _extra_ft(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(sq_ft=f"C{r}*G{r}", cy=f"J{r}*H{r}/27")


@TABLE.register("foundation_extra_ea")
def _extra_ea(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(sq_ft=f"C{r}*F{r}*G{r}", cy=f"J{r}*H{r}/27", qty_final=f"C{r}")


TABLE.validate(ITEM_TYPES)


def generate_foundation_formulas(item_type: str, row: int, item: Item | None = None, refs: Mapping[str, Any] | None = None) -> CellFormulas:
    tag = item.parsed.type if item is not None and item.parsed.type else item_type
    return TABLE.generate(tag, row, item, refs)
