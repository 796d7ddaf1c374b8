from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..config.loader import TemplateSection
from ..formulas.apply import (
    FOUNDATION_CY_TOTAL,
    GROUP_SUM,
    HAVG,
    LINE_DRILL_HEADER,
    LINE_DRILL_REF,
    LINE_DRILL_SUM,
    TRENCHING_TOTAL,
)
from ..formulas.registry import sum_fields
from ..models.items import Group, Item, ParsedItem
from ..models.sheet import FormulaSpec, RowRecord, RowRef
from ..parsers.bpp import GRAVEL_INCHES, ROAD_BASE_INCHES, manual_bpp_item
from ..parsers.trenching import trenching_items
from ..processors.pipeline import PipelineRun
from .builder import SheetBuilder

"""Per-section row emission.

Each template section is emitted by the function registered for its name;
sections nobody registered get the generic layout (subsection and
sub-subsection headers separated by blank rows). Emitters only ever append
to the SheetBuilder, so row numbers handed to FormulaSpecs are final.
"""

__all__ = [
    "SECTION_KEYS",
    "EXTRA_LINE_SUBSECTIONS",
    "LINE_DRILL_REF_TYPES",
    "AssemblyState",
    "SECTION_EMITTERS",
    "section_emitter",
    "item_tag",
    "item_record",
    "extra_line_items",
    "emit_section",
]

logger = logging.getLogger(__name__)

# template section name -> formula table
SECTION_KEYS: dict[str, str] = {
    "Demolition": "demolition",
    "Excavation": "excavation",
    "Rock Excavation": "rock_excavation",
    "SOE": "soe",
    "Foundation": "foundation",
    "Waterproofing": "waterproofing",
    "Trenching": "trenching",
    "Superstructure": "superstructure",
    "B.P.P. Alternate #2 scope": "bpp",
    "Civil / Sitework": "civil",
}

# subsection name -> extra item tag prefix
EXTRA_LINE_SUBSECTIONS: dict[str, str] = {
    "For demo Extra line item use this": "demo",
    "For soil excavation Extra line item use this": "soil_exc",
    "For Backfill Extra line item use this": "backfill",
    "For rock excavation Extra line item use this": "rock_exc",
    "For foundation Extra line item use this": "foundation",
}

# rock excavation item types mirrored as line drill label rows
LINE_DRILL_REF_TYPES = ("concrete_pier", "sewage_pit_slab", "sump_pit")

# SOE subsections whose QTY column is filled by hand
_MANUAL_QTY_SUBSECTIONS = frozenset({
    "Waler", "Raker", "Upper Raker", "Lower Raker", "Inner corner brace", "Timber waler", "Timber raker",
})

EXCAVATION_HEADER_CELLS = {"lbs": "CY", "cy": "1.3*CY"}


@dataclass
class AssemblyState:
    builder: SheetBuilder
    run: PipelineRun
    # rock excavation item id -> emitted row
    rock_rows: dict[str, RowRef] = field(default_factory=dict)

    def result(self, name: str, default: Any = None) -> Any:
        value = self.run.results.get(name)
        return default if value is None else value


SectionEmitter = Callable[[AssemblyState, TemplateSection], None]

SECTION_EMITTERS: dict[str, SectionEmitter] = {}


def section_emitter(name: str) -> Callable[[SectionEmitter], SectionEmitter]:
    def deco(fn: SectionEmitter) -> SectionEmitter:
        SECTION_EMITTERS[name] = fn
        return fn

    return deco


def item_tag(item: Item) -> str | None:
    return item.parsed.type or item.item_type


def _cell(value: Any) -> Any:
    return value if value else ""


def item_record(item: Item, **overrides: Any) -> RowRecord:
    """Particulars, takeoff, unit, qty and L/W/H of ``item``; falsy dimensions stay blank."""
    p = item.parsed
    values: dict[str, Any] = {
        "particulars": item.particulars,
        "takeoff": item.takeoff,
        "unit": item.unit,
        "qty": item.qty,
        "length": _cell(p.length),
        "width": _cell(p.width),
        "height": _cell(p.height),
        "raw_row_number": item.raw_row_number if item.raw_row_number > 0 else None,
    }
    values.update(overrides)
    return RowRecord(**values)


def extra_line_items(prefix: str) -> list[Item]:
    """The three free-form rows (area, linear, each) offered at the end of a section."""
    rows = (
        ("In SQ FT", "SQ FT", "sqft", None, None),
        ("In FT", "FT", "ft", None, 1),
        ("In EA", "EA", "ea", 1, 1),
    )
    return [
        Item(
            particulars=name,
            takeoff=1,
            unit=unit,
            parsed=ParsedItem(type=f"{prefix}_extra_{suffix}", length=length, width=width, height=1),
            raw_row_number=0,
        )
        for name, unit, suffix, length, width in rows
    ]


def _section_header(b: SheetBuilder, name: str, **cells: Any) -> RowRef:
    ref = b.append_row(RowRecord(estimate=name, **cells))
    b.blank()
    return ref


def _subsection_header(b: SheetBuilder, name: str, indent: str = "") -> RowRef:
    return b.append_row(RowRecord(particulars=f"{indent}{name}:"))


def _emit_item(
    b: SheetBuilder,
    item: Item,
    section_key: str,
    subsection: str | None = None,
    *,
    record: RowRecord | None = None,
    data: dict[str, Any] | None = None,
) -> RowRef:
    return b.emit(
        record or item_record(item),
        item_tag(item),
        section_key,
        subsection=subsection,
        item=item,
        data=data or {},
    )


def _emit_sum(
    b: SheetBuilder,
    section_key: str,
    first: RowRef,
    last: RowRef,
    fields: Sequence[str],
    subsection: str | None = None,
) -> RowRef:
    return b.emit(
        RowRecord.blank(),
        GROUP_SUM,
        section_key,
        subsection=subsection,
        first_row=first,
        last_row=last,
        data={"fields": tuple(fields)},
    )


def _emit_items_with_sum(
    b: SheetBuilder,
    items: Sequence[Item],
    section_key: str,
    subsection: str | None = None,
    *,
    fields: Sequence[str] | None = None,
    record: Callable[[Item], RowRecord] | None = None,
) -> RowRef | None:
    """Item rows followed by their sum row; ``None`` when there is nothing to emit."""
    if not items:
        return None
    first = b.next_row_number
    for item in items:
        _emit_item(b, item, section_key, subsection, record=record(item) if record else None)
    if fields is None:
        fields = sum_fields(section_key, items)
    return _emit_sum(b, section_key, RowRef(first), b.last_row, fields, subsection)


def _emit_extra_lines(b: SheetBuilder, name: str, section_key: str) -> None:
    _subsection_header(b, name)
    for item in extra_line_items(EXTRA_LINE_SUBSECTIONS[name]):
        _emit_item(b, item, section_key, name)


def _sum_fields_at(b: SheetBuilder, row: RowRef) -> tuple[str, ...]:
    spec = next((s for s in reversed(b.formulas) if s.row == row and s.item_type == GROUP_SUM), None)
    return spec.data.get("fields", ()) if spec is not None else ()


def emit_generic_section(state: AssemblyState, section: TemplateSection) -> None:
    b = state.builder
    _section_header(b, section.section)
    if not section.subsections:
        b.blank()
        return
    for sub in section.subsections:
        _subsection_header(b, sub.name)
        if sub.sub_subsections:
            for sub_sub in sub.sub_subsections:
                _subsection_header(b, sub_sub.name, indent="  ")
                b.blank()
        else:
            b.blank()


def emit_section(state: AssemblyState, section: TemplateSection) -> None:
    emitter = SECTION_EMITTERS.get(section.section, emit_generic_section)
    logger.debug(f"section {section.section}: starts at row {state.builder.next_row_number}")
    emitter(state, section)


@section_emitter("Demolition")
def _demolition(state: AssemblyState, section: TemplateSection) -> None:
    b = state.builder
    by_subsection: dict[str, list[Item]] = state.result("demolition", {})
    _section_header(b, section.section)
    for name in section.subsection_names:
        if name in EXTRA_LINE_SUBSECTIONS:
            _emit_extra_lines(b, name, "demolition")
            b.blank()
            continue
        items = by_subsection.get(name) or []
        if not items:
            continue
        _subsection_header(b, name)
        _emit_items_with_sum(b, items, "demolition", name)
        b.blank()


def _emit_havg(b: SheetBuilder, section_key: str, sum_row: RowRef) -> None:
    b.blank()
    b.emit(RowRecord(particulars="Havg"), HAVG, section_key, ref_row=sum_row)


def _earthwork_fields(section_key: str, items: Sequence[Item]) -> tuple[str, ...]:
    return sum_fields(section_key, items) or ("sq_ft", "cy")


@section_emitter("Excavation")
def _excavation(state: AssemblyState, section: TemplateSection) -> None:
    b = state.builder
    lists = {
        "Excavation": state.result("excavation", []),
        "Backfill": state.result("backfill", []),
        "Mud slab": state.result("mud_slab", []),
    }
    _section_header(b, section.section, **EXCAVATION_HEADER_CELLS)
    for name in section.subsection_names:
        if name in EXTRA_LINE_SUBSECTIONS:
            _emit_extra_lines(b, name, "excavation")
        else:
            items = lists.get(name) or []
            if items:
                _subsection_header(b, name)
                sum_row = _emit_items_with_sum(b, items, "excavation", name, fields=_earthwork_fields("excavation", items))
                if name == "Excavation":
                    _emit_havg(b, "excavation", sum_row)
        b.blank()


def _emit_line_drill(state: AssemblyState, rock_items: Sequence[Item], line_drill: Sequence[Item]) -> None:
    b = state.builder
    b.emit(RowRecord(qty="Lifts", height="Height"), LINE_DRILL_HEADER, "rock_excavation", subsection="Line drill")
    first = b.next_row_number
    for item in rock_items:
        if item.item_type not in LINE_DRILL_REF_TYPES:
            continue
        b.emit(
            RowRecord(particulars=item.particulars, unit="FT"),
            LINE_DRILL_REF,
            "rock_excavation",
            subsection="Line drill",
            item=item,
            ref_row=state.rock_rows.get(item.item_id or ""),
            data={"ref_kind": item.item_type},
        )
    for item in line_drill:
        record = item_record(item, qty="", length="", width="", height=_cell(item.parsed.height))
        _emit_item(b, item, "rock_excavation", "Line drill", record=record)
    b.emit(
        RowRecord.blank(),
        LINE_DRILL_SUM,
        "rock_excavation",
        subsection="Line drill",
        first_row=RowRef(first),
        last_row=b.last_row,
    )


@section_emitter("Rock Excavation")
def _rock_excavation(state: AssemblyState, section: TemplateSection) -> None:
    b = state.builder
    rock_items: list[Item] = state.result("rock_excavation", [])
    line_drill: list[Item] = state.result("line_drill", [])
    _section_header(b, section.section, **EXCAVATION_HEADER_CELLS)
    for name in section.subsection_names:
        if name in EXTRA_LINE_SUBSECTIONS:
            _emit_extra_lines(b, name, "rock_excavation")
        elif name == "Excavation" and rock_items:
            _subsection_header(b, name)
            first = b.next_row_number
            for item in rock_items:
                ref = _emit_item(b, item, "rock_excavation", name)
                if item.item_id:
                    state.rock_rows[item.item_id] = ref
            sum_row = _emit_sum(b, "rock_excavation", RowRef(first), b.last_row, ("sq_ft", "cy"), name)
            _emit_havg(b, "rock_excavation", sum_row)
        elif name == "Line drill" and line_drill:
            _subsection_header(b, name)
            _emit_line_drill(state, rock_items, line_drill)
        b.blank()


def _soe_record(item: Item, subsection: str) -> RowRecord:
    p = item.parsed
    qty = "" if subsection in _MANUAL_QTY_SUBSECTIONS else _cell(item.qty)
    return item_record(item, qty=qty, height=_cell(p.calculated_height or p.height_raw or p.height))


def _soldier_pile_record(item: Item) -> RowRecord:
    return item_record(item, length="", width="", height=_cell(item.parsed.calculated_height))


def _has_backpacking(lagging: Iterable[Item]) -> bool:
    return any("w/backpacking" in str(item.particulars).lower() for item in lagging)


@section_emitter("SOE")
def _soe(state: AssemblyState, section: TemplateSection) -> None:
    b = state.builder
    flat: dict[str, list[Item]] = state.result("soe", {})
    pile_groups: list[Group] = state.result("soldier_piles", [])
    angle_groups: list[Group] = state.result("supporting_angles", [])
    backpacking = _has_backpacking(flat.get("Timber lagging") or [])
    lagging_sum: RowRef | None = None

    _section_header(b, section.section)
    for name in section.subsection_names:
        if name == "Backpacking" and not backpacking:
            continue
        _subsection_header(b, name)
        if name == "Drilled soldier pile":
            for idx, group in enumerate(pile_groups):
                _emit_items_with_sum(b, group.items, "soe", name, record=_soldier_pile_record)
                if idx < len(pile_groups) - 1:
                    b.blank()
        elif name == "Supporting angle":
            for group in angle_groups:
                b.append_row(RowRecord(particulars=f"{group.label or 'Other'}:"))
                _emit_items_with_sum(b, group.items, "soe", name, record=lambda i: _soe_record(i, name))
        elif name == "Backpacking":
            b.emit(
                RowRecord(particulars="Backpacking", unit="SQ FT"),
                "backpacking_item",
                "soe",
                subsection=name,
                data={"timber_lagging_sum_row": lagging_sum.number if lagging_sum else None},
            )
        else:
            items = flat.get(name) or []
            sum_row = _emit_items_with_sum(b, items, "soe", name, record=lambda i: _soe_record(i, name))
            if name == "Timber lagging":
                lagging_sum = sum_row
            elif name == "Underpinning" and sum_row is not None:
                b.emit(
                    RowRecord(particulars="Shims", unit="SQ FT"),
                    "shims",
                    "soe",
                    subsection=name,
                    data={"underpinning_sum_row": sum_row.number},
                )
        b.blank()


def _stair_slab_item(stair: Item) -> Item:
    return Item(
        particulars="Stair slab",
        takeoff="",
        unit="FT",
        parsed=ParsedItem(type="stairs_on_grade", item_sub_type="stair_slab", subsection=stair.parsed.subsection),
        raw_row_number=0,
    )


def _emit_stairs_group(b: SheetBuilder, group: Group, name: str) -> RowRef:
    """Label row, landing and stairs rows, the derived stair slab, then the sum."""
    b.append_row(RowRecord(particulars=f"Stair {group.label}:"))
    first = b.next_row_number
    items = list(group.items)
    for item in group.items:
        ref = _emit_item(b, item, "foundation", name)
        if item.parsed.item_sub_type == "stairs":
            slab = _stair_slab_item(item)
            items.append(slab)
            _emit_item(
                b,
                slab,
                "foundation",
                name,
                data={"stairs_row": ref.number, "has_width_from_name": bool(item.parsed.width_from_name)},
            )
    return _emit_sum(b, "foundation", RowRef(first), b.last_row, sum_fields("foundation", items), name)


@section_emitter("Foundation")
def _foundation(state: AssemblyState, section: TemplateSection) -> None:
    b = state.builder
    by_subsection: dict[str, list[Group]] = state.result("foundation", {})
    cy_rows: list[RowRef] = []
    header = _section_header(b, section.section)
    for name in section.subsection_names:
        if name in EXTRA_LINE_SUBSECTIONS:
            _emit_extra_lines(b, name, "foundation")
            b.blank()
            continue
        groups = state.result("misc_piles", []) if name == "Piles" else by_subsection.get(name) or []
        groups = [g for g in groups if g.items]
        if not groups:
            continue
        _subsection_header(b, name)
        for group in groups:
            if group.kind == "stairs":
                sum_row = _emit_stairs_group(b, group, name)
            else:
                sum_row = _emit_items_with_sum(b, group.items, "foundation", name)
            b.blank()
            if sum_row is not None and "cy" in _sum_fields_at(b, sum_row):
                cy_rows.append(sum_row)
    b.append_formula(
        FormulaSpec(row=header, item_type=FOUNDATION_CY_TOTAL, section="foundation", refs=tuple(cy_rows)),
        deferred=True,
    )


@section_emitter("Waterproofing")
def _waterproofing(state: AssemblyState, section: TemplateSection) -> None:
    b = state.builder
    by_subsection: dict[str, list[Item]] = state.result("waterproofing", {})
    _section_header(b, section.section)
    for name in section.subsection_names:
        items = by_subsection.get(name) or []
        if not items:
            continue
        _subsection_header(b, name)
        _emit_items_with_sum(b, items, "waterproofing", name)
        b.blank()


@section_emitter("Trenching")
def _trenching(state: AssemblyState, section: TemplateSection) -> None:
    b = state.builder
    header = _section_header(b, section.section)
    previous: RowRef | None = None
    for item in trenching_items():
        data = {"takeoff_ref_row": previous.number} if previous is not None else {}
        previous = _emit_item(b, item, "trenching", "Trenching", data=data)
    b.append_formula(
        FormulaSpec(row=header, item_type=TRENCHING_TOTAL, section="trenching", ref_row=previous),
        deferred=True,
    )
    b.blank()


@section_emitter("Superstructure")
def _superstructure(state: AssemblyState, section: TemplateSection) -> None:
    b = state.builder
    by_subsection: dict[str, list[Group]] = state.result("superstructure", {})
    _section_header(b, section.section)
    for name in section.subsection_names:
        groups = [g for g in by_subsection.get(name) or [] if g.items]
        if not groups:
            continue
        _subsection_header(b, name)
        for idx, group in enumerate(groups):
            if idx:
                b.blank()
            _emit_items_with_sum(b, group.items, "superstructure", name)
        b.blank()


def _manual_bpp_row(tag: str, subsection: str, street: str, inches: int, label: str) -> Item:
    return Item(
        particulars=f'{inches}" thick {label}',
        takeoff="",
        unit="SQ FT",
        parsed=manual_bpp_item(tag, subsection, street, inches),
        raw_row_number=0,
        item_type=tag,
    )


@section_emitter("B.P.P. Alternate #2 scope")
def _bpp(state: AssemblyState, section: TemplateSection) -> None:
    b = state.builder
    streets: dict[str, dict[str, list[Item]]] = state.result("bpp_alternate", {})
    _section_header(b, section.section)
    for street, by_subsection in streets.items():
        b.append_row(RowRecord(particulars=f"Street name: {street}"))
        for name in section.subsection_names:
            if name == "Gravel":
                items = [_manual_bpp_row("bpp_gravel", name, street, n, "gravel") for n in GRAVEL_INCHES]
            elif name == "Conc road base":
                items = [_manual_bpp_row("bpp_conc_road_base", name, street, ROAD_BASE_INCHES, "conc road base")]
            else:
                items = by_subsection.get(name) or []
            if not items:
                continue
            _subsection_header(b, name)
            if name == "Conc road base":
                for item in items:
                    _emit_item(b, item, "bpp", name, record=item_record(item, qty=""))
            else:
                _emit_items_with_sum(b, items, "bpp", name, record=lambda i: item_record(i, qty=""))
        b.blank()
    b.blank()


@section_emitter("Civil / Sitework")
def _civil(state: AssemblyState, section: TemplateSection) -> None:
    b = state.builder
    demo: dict[str, list[Group]] = state.result("civil_demo", {})
    _section_header(b, section.section)
    for sub in section.subsections:
        _subsection_header(b, sub.name)
        if sub.name == "Demo":
            for sub_sub in sub.sub_subsections:
                groups = [g for g in demo.get(sub_sub.name) or [] if g.items]
                if not groups:
                    continue
                _subsection_header(b, sub_sub.name, indent="  ")
                for group in groups:
                    _emit_items_with_sum(b, group.items, "civil", sub_sub.name)
            b.blank()
        elif sub.sub_subsections:
            for sub_sub in sub.sub_subsections:
                _subsection_header(b, sub_sub.name, indent="  ")
                b.blank()
        else:
            b.blank()
