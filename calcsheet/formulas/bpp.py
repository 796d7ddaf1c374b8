from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models.items import Item
from ..models.sheet import CellFormulas
from ..parsers.bpp import ITEM_TYPES
from .registry import table_for

"""B.P.P. alternate scope formulas.

Area items (sidewalk, driveway, asphalt, gravel, road base) put the takeoff
in SQ FT; curbs and joints are linear. Gravel and road base rows are
synthetic items whose thickness is preset by the assembler.
"""

__all__ = [
    "TABLE",
    "generate_bpp_formulas",
]

TABLE = table_for("bpp")


def _height(item: Item | None) -> Any:
    if item is None:
        return None
    return item.parsed.height_formula or item.parsed.height


@TABLE.register(
    "bpp_concrete_sidewalk",
    "bpp_concrete_driveway",
    "bpp_full_depth_asphalt",
    "bpp_gravel",
    "bpp_conc_road_base",
)
def _area(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(sq_ft=f"C{r}", cy=f"J{r}*H{r}/27", height=_height(item))


@TABLE.register("bpp_concrete_curb")
def _curb(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    width = None
    height = None
    if item is not None:
        width = item.parsed.width_formula or item.parsed.width
        height = item.parsed.height
    return CellFormulas(ft=f"C{r}", sq_ft=f"I{r}*H{r}", cy=f"I{r}*G{r}/27", width=width, height=height)


@TABLE.register("bpp_expansion_joint")
def _expansion_joint(r: int, item: Item | None, refs: Mapping[str, Any]) -> CellFormulas:
    return CellFormulas(ft=f"C{r}")


TABLE.validate(ITEM_TYPES)


def generate_bpp_formulas(item_type: str, row: int, item: Item | None = None, refs: Mapping[str, Any] | None = None) -> CellFormulas:
    tag = item.parsed.type if item is not None and item.parsed.type else item_type
    return TABLE.generate(tag, row, item, refs)
