from __future__ import annotations

import pytest

from calcsheet.assembler.builder import SheetBuilder
from calcsheet.assembler.sections import AssemblyState, emit_section, extra_line_items
from calcsheet.config.loader import TemplateSection, TemplateSubsection, TemplateSubSubsection
from calcsheet.formulas.apply import FOUNDATION_CY_TOTAL, GROUP_SUM, TRENCHING_TOTAL
from calcsheet.formulas.registry import generate
from calcsheet.models.items import Group, Item, ParsedItem
from calcsheet.models.sheet import RowRef
from calcsheet.processors.bpp import process_bpp_alternate_items
from calcsheet.processors.civil import process_civil_demo_items
from calcsheet.processors.pipeline import PipelineRun
from calcsheet.processors.superstructure import process_superstructure_items
from calcsheet.processors.waterproofing import process_waterproofing_items

"""Row layout of the section emitters and the processors feeding them."""


def _row(text, total="", unit="", estimate="") -> list:
    return [1, text, total, unit, "", estimate]


def _emit(section: TemplateSection, **results) -> SheetBuilder:
    b = SheetBuilder([])
    emit_section(AssemblyState(builder=b, run=PipelineRun(results=results)), section)
    return b


def _particulars(b: SheetBuilder, start: int) -> list:
    return [row[1] for row in b.rows[start - 1:]]


def _specs(b: SheetBuilder) -> dict:
    return {s.row_number: s for s in b.formulas}


@pytest.fixture()
def slab_rows() -> list[list]:
    return [
        _row('Slab 8" thick', 100, "SQ FT"),
        _row('Slab 10" thick', 50, "SQ FT"),
        _row('Slab 8" thick', 30, "SQ FT"),
        _row('Slab 8" thick', 20, "SQ FT", estimate="Foundation"),
    ]


def test_superstructure_groups_by_key_in_first_appearance_order(headers, slab_rows):
    groups = process_superstructure_items(slab_rows, headers)["CIP Slabs"]
    assert [g.group_key for g in groups] == ["slab_8", "slab_var"]
    assert [i.takeoff for i in groups[0].items] == [100, 30]
    assert groups[1].items[0].parsed.height == pytest.approx(10 / 12)


def test_superstructure_groups_are_separated_by_a_blank_row(headers, slab_rows):
    results = {"superstructure": process_superstructure_items(slab_rows, headers)}
    b = _emit(TemplateSection("Superstructure", (TemplateSubsection("CIP Slabs"),)), **results)
    assert b.rows[1][0] == "Superstructure"
    assert _particulars(b, 4) == ["CIP Slabs:", 'Slab 8" thick', 'Slab 8" thick', "", "", 'Slab 10" thick', "", ""]
    specs = _specs(b)
    assert specs[7].item_type == GROUP_SUM
    assert 8 not in specs
    assert not any(b.rows[7])
    assert specs[10].item_type == GROUP_SUM
    assert specs[10].data["fields"] == ("sq_ft", "cy")


def test_bpp_items_are_keyed_by_street(headers):
    rows = [
        _row('West Street - BPP concrete sidewalk 4" thick', 200, "SQ FT"),
        _row("East Avenue - BPP concrete curb 6\" wide Height=1'-6\"", 80, "FT"),
        _row("Unrelated sidewalk note", 5, "SQ FT"),
    ]
    streets = process_bpp_alternate_items(rows, headers)
    assert list(streets) == ["West Street", "East Avenue"]
    sidewalk = streets["West Street"]["Concrete sidewalk"][0]
    assert sidewalk.parsed.height_formula == "4/12"
    curb = streets["East Avenue"]["Concrete curb"][0]
    assert curb.parsed.width_formula == "6/12"
    assert curb.parsed.height == pytest.approx(1.5)


def test_bpp_each_street_gets_manual_gravel_and_road_base_rows(headers):
    rows = [
        _row('West Street - BPP concrete sidewalk 4" thick', 200, "SQ FT"),
        _row("East Avenue - BPP concrete curb 6\" wide Height=1'-6\"", 80, "FT"),
    ]
    section = TemplateSection(
        "B.P.P. Alternate #2 scope",
        (TemplateSubsection("Gravel"), TemplateSubsection("Concrete sidewalk"), TemplateSubsection("Conc road base")),
    )
    b = _emit(section, bpp_alternate=process_bpp_alternate_items(rows, headers))
    assert _particulars(b, 4) == [
        "Street name: West Street",
        "Gravel:",
        '4" thick gravel',
        '6" thick gravel',
        "",
        "Concrete sidewalk:",
        'West Street - BPP concrete sidewalk 4" thick',
        "",
        "Conc road base:",
        '6" thick conc road base',
        "",
        "Street name: East Avenue",
        "Gravel:",
        '4" thick gravel',
        '6" thick gravel',
        "",
        "Conc road base:",
        '6" thick conc road base',
        "",
        "",
    ]
    specs = _specs(b)
    assert [specs[n].item_type for n in (6, 7, 8)] == ["bpp_gravel", "bpp_gravel", GROUP_SUM]
    assert b.rows[5][2] == ""
    # road base rows carry no sum row
    assert specs[13].item_type == "bpp_conc_road_base"
    assert 14 not in specs


def test_waterproofing_filters_on_estimate_and_lists_pit_walls_twice(headers):
    rows = [
        _row("FW (1'-0\" x 10'-0\")", 120, "FT"),
        _row("FW (1'-0\" x 8'-0\")", 50, "FT", estimate="Foundation"),
        _row("Elevator pit wall (1'-0\" x 4'-0\")", 30, "FT", estimate="Waterproofing"),
        _row('Elevator pit slab 12"', 100, "SQ FT"),
    ]
    out = process_waterproofing_items(rows, headers)
    exterior = out["Exterior side"]
    assert [i.particulars for i in exterior] == ["FW (1'-0\" x 10'-0\")", "Elevator pit wall (1'-0\" x 4'-0\")"]
    assert exterior[0].parsed.height == 12
    assert exterior[0].parsed.group_key == "DIM_1'-0\""
    assert exterior[1].parsed.height == 6
    assert [i.parsed.height for i in out["Negative side"]] == [4]
    assert [i.parsed.group_key for i in out["Horizontal"]] == ["THICK_12"]
    assert generate("waterproofing", "waterproofing_exterior_side", 9).sq_ft == "H9*I9"


def test_civil_demo_buckets(headers):
    rows = [
        _row("Remove existing chain link fence", 100, "FT"),
        _row("Remove existing wood fence", 40, "FT"),
        _row("Remove existing vinyl fence", 20, "FT"),
        _row("Remove existing asphalt pavement", 500, "SQ FT"),
        _row("Chain link fence", 10, "FT"),
    ]
    out = process_civil_demo_items(rows, headers)
    fences = out["Demo fence"]
    assert [(g.kind, len(g.items)) for g in fences] == [("chain_link_vinyl", 2), ("wood", 1)]
    assert fences[0].items[0].parsed.height == 6
    assert [len(g.items) for g in out["Demo asphalt"]] == [1]
    assert out["Demo pipe"] == []


def test_civil_demo_emitter_nests_sub_subsections(headers):
    rows = [
        _row("Remove existing chain link fence", 100, "FT"),
        _row("Remove existing wood fence", 40, "FT"),
        _row("Remove existing asphalt pavement", 500, "SQ FT"),
    ]
    demo = TemplateSubsection(
        "Demo",
        (TemplateSubSubsection("Demo asphalt"), TemplateSubSubsection("Demo fence"), TemplateSubSubsection("Demo pipe")),
    )
    b = _emit(TemplateSection("Civil / Sitework", (demo,)), civil_demo=process_civil_demo_items(rows, headers))
    assert _particulars(b, 4) == [
        "Demo:",
        "  Demo asphalt:",
        "Remove existing asphalt pavement",
        "",
        "  Demo fence:",
        "Remove existing chain link fence",
        "",
        "Remove existing wood fence",
        "",
        "",
    ]
    specs = _specs(b)
    assert specs[6].item_type == "civil_demo_asphalt"
    assert [specs[n].item_type for n in (7, 10, 12)] == [GROUP_SUM] * 3
    assert generate("civil", "civil_demo_fence", 9).sq_ft == "I9*H9"


def _cap(name: str) -> Item:
    parsed = ParsedItem(type="pile_cap", length=4.0, width=4.0, height=3.0)
    return Item(particulars=name, takeoff=2, unit="EA", parsed=parsed, raw_row_number=5)


def _stelcor() -> Item:
    parsed = ParsedItem(type="stelcor_drilled_displacement_pile", height_raw=40.0, calculated_height=40.0)
    return Item(particulars="Stelcor drilled displacement pile H=40'-0\"", takeoff=6, unit="EA", parsed=parsed, raw_row_number=6)


def test_foundation_cy_total_points_at_sum_rows_with_volume():
    foundation = {
        "Pile caps": [Group(group_key="PILE_CAP", items=(_cap("PC-1"), _cap("PC-2")))],
        "Stelcor drilled displacement pile": [Group(group_key="ALL", items=(_stelcor(),))],
    }
    section = TemplateSection(
        "Foundation",
        (TemplateSubsection("Pile caps"), TemplateSubsection("Stelcor drilled displacement pile")),
    )
    b = _emit(section, foundation=foundation)
    total = next(s for s in b.formulas if s.item_type == FOUNDATION_CY_TOTAL)
    assert total.row == RowRef(2)
    # pile cap sum at row 7; the stelcor sum has no CY column
    assert total.refs == (RowRef(7),)
    assert b.formulas[-1] is total
    b.check_alignment()


def test_trenching_total_refers_to_last_layer():
    b = _emit(TemplateSection("Trenching"))
    total = next(s for s in b.formulas if s.item_type == TRENCHING_TOTAL)
    layers = [s for s in b.formulas if s.item_type != TRENCHING_TOTAL]
    assert total.row == RowRef(2)
    assert layers
    assert total.ref_row == layers[-1].row
    assert layers[1].data["takeoff_ref_row"] == layers[0].row_number


def test_rock_excavation_extra_lines_use_rock_exc_prefix():
    assert [i.parsed.type for i in extra_line_items("rock_exc")] == [
        "rock_exc_extra_sqft",
        "rock_exc_extra_ft",
        "rock_exc_extra_ea",
    ]
    section = TemplateSection("Rock Excavation", (TemplateSubsection("For rock excavation Extra line item use this"),))
    b = _emit(section)
    tags = [s.item_type for s in b.formulas]
    assert tags == ["rock_exc_extra_sqft", "rock_exc_extra_ft", "rock_exc_extra_ea"]
    assert all(s.section == "rock_excavation" for s in b.formulas)
    ea = generate("rock_excavation", "rock_exc_extra_ea", 12, refs={"tag": "rock_exc_extra_ea"})
    assert ea.qty_final == "C12"
    assert ea.cy == "J12*H12/27"
