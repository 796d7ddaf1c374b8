from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from ..models.sheet import CalculationSheet, CellFormulas, CellWrite, FormulaSpec
from . import (  # noqa: F401  (registers every area's formula table)
    bpp,
    civil,
    demolition,
    excavation,
    foundation,
    soe,
    superstructure,
    trenching,
    waterproofing,
)
from .registry import TABLES, RegistryError, generate

"""Formula application: FormulaSpecs -> concrete cell writes.

A spec whose ``item_type`` names a row kind (sums, Havg, line drill labels,
section totals) is resolved by that kind's resolver; any other spec is a data
row and goes to its section's formula table. Formulas are written as
``=<expr>``, numbers as literal values.
"""

__all__ = [
    "FIELD_COLUMNS",
    "GROUP_SUM",
    "HAVG",
    "LINE_DRILL_HEADER",
    "LINE_DRILL_REF",
    "LINE_DRILL_SUM",
    "FOUNDATION_CY_TOTAL",
    "TRENCHING_TOTAL",
    "ROW_KINDS",
    "row_kind",
    "formulas_for",
    "to_cell_writes",
    "resolve_spec",
    "resolve_cell_writes",
]

logger = logging.getLogger(__name__)

FIELD_COLUMNS: dict[str, str] = {
    "particulars": "B",
    "takeoff": "C",
    "unit": "D",
    "qty": "E",
    "length": "F",
    "width": "G",
    "height": "H",
    "ft": "I",
    "sq_ft": "J",
    "lbs": "K",
    "cy": "L",
    "qty_final": "M",
}

GROUP_SUM = "group_sum"
HAVG = "havg"
LINE_DRILL_HEADER = "line_drill_header"
LINE_DRILL_REF = "line_drill_ref"
LINE_DRILL_SUM = "line_drill_sum"
FOUNDATION_CY_TOTAL = "foundation_cy_total"
TRENCHING_TOTAL = "trenching_total"

RowResolver = Callable[[FormulaSpec], CellFormulas]

ROW_KINDS: dict[str, RowResolver] = {}


def row_kind(name: str) -> Callable[[RowResolver], RowResolver]:
    def deco(fn: RowResolver) -> RowResolver:
        if name in ROW_KINDS:
            raise RegistryError(f"duplicate resolver for row kind '{name}'")
        ROW_KINDS[name] = fn
        return fn

    return deco


@row_kind(GROUP_SUM)
def _group_sum(spec: FormulaSpec) -> CellFormulas:
    first, last = spec.first_row, spec.last_row
    formulas = CellFormulas()
    for name in spec.data.get("fields", ()):
        col = FIELD_COLUMNS[name]
        setattr(formulas, name, f"SUM({col}{first}:{col}{last})")
    return formulas


@row_kind(HAVG)
def _havg(spec: FormulaSpec) -> CellFormulas:
    s = spec.ref_row
    return CellFormulas(takeoff=f"(L{s}*27)/J{s}")


@row_kind(LINE_DRILL_HEADER)
def _line_drill_header(spec: FormulaSpec) -> CellFormulas:
    return CellFormulas()


@row_kind(LINE_DRILL_REF)
def _line_drill_ref(spec: FormulaSpec) -> CellFormulas:
    """Label row mirroring a rock excavation item: its perimeter, drilled in 2 ft lifts."""
    r, ref = spec.row, spec.ref_row
    kind = spec.data.get("ref_kind")
    if kind == "sump_pit":
        formulas = CellFormulas(ft=f"C{r}")
        if ref is not None:
            formulas.particulars = f"B{ref}"
            formulas.takeoff = f"C{ref}*8"
        return formulas
    formulas = CellFormulas(qty=f"ROUNDUP(H{r}/2,0)", ft=f"E{r}*C{r}")
    if ref is not None:
        formulas.particulars = f"B{ref}"
        formulas.height = f"H{ref}"
        if kind == "concrete_pier":
            formulas.takeoff = f"((G{ref}+F{ref})*2)*C{ref}"
        else:
            formulas.takeoff = f"SQRT(C{ref})*4"
    return formulas


@row_kind(LINE_DRILL_SUM)
def _line_drill_sum(spec: FormulaSpec) -> CellFormulas:
    # both faces of the cut
    return CellFormulas(ft=f"SUM(I{spec.first_row}:I{spec.last_row})*2")


@row_kind(FOUNDATION_CY_TOTAL)
def _foundation_cy_total(spec: FormulaSpec) -> CellFormulas:
    if not spec.refs:
        return CellFormulas()
    return CellFormulas(takeoff="SUM(" + ",".join(f"L{ref}" for ref in spec.refs) + ")")


@row_kind(TRENCHING_TOTAL)
def _trenching_total(spec: FormulaSpec) -> CellFormulas:
    if spec.ref_row is None:
        return CellFormulas()
    return CellFormulas(takeoff=f"L{spec.ref_row}")


def _check_row_kinds() -> None:
    clashes = sorted(kind for kind in ROW_KINDS for table in TABLES.values() if kind in table)
    if clashes:
        raise RegistryError(f"row kinds shadow item types: {', '.join(clashes)}")


_check_row_kinds()


def formulas_for(spec: FormulaSpec) -> CellFormulas:
    resolver = ROW_KINDS.get(spec.item_type)
    if resolver is not None:
        return resolver(spec)
    refs: dict[str, Any] = {"tag": spec.item_type, **spec.data}
    return generate(spec.section, spec.item_type, spec.row_number, spec.item, refs)


def _cell_value(value: Any) -> Any:
    if isinstance(value, str):
        return "=" + value
    return value


def to_cell_writes(row: int, formulas: CellFormulas) -> list[CellWrite]:
    """One write per filled field; blank strings are skipped."""
    writes = []
    for name, value in formulas.items():
        if value == "":
            continue
        writes.append(CellWrite(cell_ref=f"{FIELD_COLUMNS[name]}{row}", value=_cell_value(value)))
    return writes


def resolve_spec(spec: FormulaSpec) -> list[CellWrite]:
    return to_cell_writes(spec.row_number, formulas_for(spec))


def resolve_cell_writes(sheet: CalculationSheet | Iterable[FormulaSpec]) -> list[CellWrite]:
    """Cell writes for every spec, in spec order.

    A spec that cannot be resolved is logged and skipped; the rest of the
    sheet still resolves.
    """
    specs = sheet.formulas if isinstance(sheet, CalculationSheet) else sheet
    writes: list[CellWrite] = []
    for spec in specs:
        try:
            writes.extend(resolve_spec(spec))
        except (RegistryError, KeyError, TypeError) as e:
            logger.warning(f"row {spec.row_number} ({spec.section}/{spec.item_type}): {e}")
    return writes
