from __future__ import annotations

import pytest

from calcsheet.formulas.apply import (
    FOUNDATION_CY_TOTAL,
    GROUP_SUM,
    HAVG,
    LINE_DRILL_REF,
    LINE_DRILL_SUM,
    TRENCHING_TOTAL,
    formulas_for,
    resolve_cell_writes,
    resolve_spec,
    to_cell_writes,
)
from calcsheet.formulas.excavation import generate_excavation_formulas, generate_rock_excavation_formulas
from calcsheet.formulas.registry import FormulaTable, RegistryError, generate, sum_fields
from calcsheet.formulas.soe import generate_soe_formulas
from calcsheet.models.items import Item, ParsedItem
from calcsheet.models.sheet import CellFormulas, FormulaSpec, RowRef
from calcsheet.parsers.soe import calculate_pile_weight, parse_anchor, parse_guide_wall, parse_soldier_pile


def _item(parsed: ParsedItem, unit: str = "EA", weight: float = 0.0, item_type: str | None = None) -> Item:
    return Item(particulars="x", takeoff=1.0, unit=unit, parsed=parsed, raw_row_number=5, weight=weight, item_type=item_type)


def test_table_rejects_duplicate_and_missing_tags():
    table = FormulaTable("scratch")

    @table.register("a")
    def _a(r, item, refs):
        return CellFormulas(ft=f"C{r}")

    with pytest.raises(RegistryError):
        table.register("a")(_a)
    with pytest.raises(RegistryError):
        table.validate({"a", "b"})
    with pytest.raises(RegistryError):
        table.generate("missing", 1)
    assert table.generate("a", 3).ft == "C3"


def test_unknown_section_raises():
    with pytest.raises(RegistryError):
        generate("no-such-section", "x", 1)


def test_demolition_branches():
    assert generate("demolition", "demo_sog", 7) == CellFormulas(sq_ft="C7", cy="J7*H7/27")
    assert generate("demolition", "demo_fw", 8).sq_ft == "C8*G8"
    footing = generate("demolition", "demo_isolated_footing", 9)
    assert footing.sq_ft == "F9*G9*C9"
    assert footing.qty_final == "C9"


def test_excavation_backfill_goes_straight_to_cy():
    exc = _item(ParsedItem(type="exc", subsection="excavation"), unit="SQ FT")
    backfill = _item(ParsedItem(type="backfill", subsection="backfill"), unit="SQ FT")
    assert generate_excavation_formulas("exc", 4, exc) == CellFormulas(sq_ft="C4", lbs="J4*H4/27", cy="K4*1.3")
    assert generate_excavation_formulas("backfill", 4, backfill) == CellFormulas(sq_ft="C4", cy="J4*H4/27")


def test_excavation_footing_blocks_need_each_unit():
    footing = _item(ParsedItem(type="f"), unit="EA")
    assert generate_excavation_formulas("f", 3, footing).sq_ft == "F3*G3*C3"
    assert generate_excavation_formulas("f", 3, footing.with_(unit="SQ FT")) == CellFormulas()


def test_rock_excavation_formulas():
    assert generate_rock_excavation_formulas("concrete_pier", 2).sq_ft == "C2*F2*G2"
    assert generate_rock_excavation_formulas("sump_pit", 2) == CellFormulas(sq_ft="16*C2", cy="1.3*C2")
    assert generate_rock_excavation_formulas("line_drilling", 2) == CellFormulas(qty="ROUNDUP(H2/2,0)", ft="E2*C2")


def test_soe_pile_weight_is_fixed_to_three_decimals():
    parsed = parse_soldier_pile("Drilled soldier pile 24Ø x1 H=27'-6\" E=5'-0\"")
    item = _item(parsed, weight=calculate_pile_weight(parsed))
    formulas = generate_soe_formulas("soldier_pile", 12, item)
    assert formulas.ft == "H12*C12"
    assert formulas.lbs == "I12*245.870"
    assert formulas.qty_final == "C12"


def test_soe_rock_anchor_and_guide_wall_literals():
    anchor = _item(parse_anchor("Rock anchor (Free length=10'-0\" + Bond length=15'-0\")", "rock_anchor"))
    assert generate_soe_formulas("rock_anchor", 3, anchor).length == 30
    wall = _item(parse_guide_wall("Guide wall (4'-6½\" x 3'-0\")"), unit="FT")
    formulas = generate_soe_formulas("guide_wall", 4, wall)
    assert formulas.width == "4+(6.5/12)"
    assert formulas.height == 3.0
    assert formulas.cy == "J4*H4/27"


def test_soe_backpacking_and_shims_use_referenced_rows():
    assert generate("soe", "backpacking_item", 20, None, {"timber_lagging_sum_row": 18}).takeoff == "J18"
    assert generate("soe", "shims", 30, None, {"underpinning_sum_row": 28}).ft == "I28"


def test_sum_fields_follow_generated_columns():
    items = [_item(ParsedItem(type="demo_sog")), _item(ParsedItem(type="demo_isolated_footing"))]
    assert sum_fields("demolition", items) == ("sq_ft", "cy", "qty_final")
    assert sum_fields("no-such-section", items) == ()


def test_group_sum_and_havg_rows():
    spec = FormulaSpec(
        row=RowRef(10), item_type=GROUP_SUM, section="demolition",
        first_row=RowRef(5), last_row=RowRef(9), data={"fields": ("sq_ft", "cy")},
    )
    formulas = formulas_for(spec)
    assert formulas.sq_ft == "SUM(J5:J9)"
    assert formulas.cy == "SUM(L5:L9)"
    havg = formulas_for(FormulaSpec(row=RowRef(12), item_type=HAVG, section="excavation", ref_row=RowRef(10)))
    assert havg.takeoff == "(L10*27)/J10"


def test_line_drill_rows():
    pier = formulas_for(FormulaSpec(
        row=RowRef(40), item_type=LINE_DRILL_REF, section="rock_excavation",
        ref_row=RowRef(33), data={"ref_kind": "concrete_pier"},
    ))
    assert pier.takeoff == "((G33+F33)*2)*C33"
    assert pier.qty == "ROUNDUP(H40/2,0)"
    assert pier.height == "H33"
    sump = formulas_for(FormulaSpec(
        row=RowRef(41), item_type=LINE_DRILL_REF, section="rock_excavation",
        ref_row=RowRef(35), data={"ref_kind": "sump_pit"},
    ))
    assert sump.takeoff == "C35*8"
    assert sump.ft == "C41"
    total = formulas_for(FormulaSpec(
        row=RowRef(45), item_type=LINE_DRILL_SUM, section="rock_excavation",
        first_row=RowRef(40), last_row=RowRef(44),
    ))
    assert total.ft == "SUM(I40:I44)*2"


def test_section_totals():
    cy = formulas_for(FormulaSpec(
        row=RowRef(100), item_type=FOUNDATION_CY_TOTAL, section="foundation",
        refs=(RowRef(110), RowRef(120)),
    ))
    assert cy.takeoff == "SUM(L110,L120)"
    assert formulas_for(FormulaSpec(row=RowRef(100), item_type=FOUNDATION_CY_TOTAL, section="foundation")) == CellFormulas()
    trench = formulas_for(FormulaSpec(row=RowRef(200), item_type=TRENCHING_TOTAL, section="trenching", ref_row=RowRef(205)))
    assert trench.takeoff == "L205"


def test_cell_writes_prefix_formulas_and_keep_literals():
    writes = to_cell_writes(7, CellFormulas(sq_ft="C7", length=30, particulars=""))
    assert [(w.cell_ref, w.value) for w in writes] == [("J7", "=C7"), ("F7", 30)]


def test_resolve_cell_writes_skips_unresolvable_specs():
    good = FormulaSpec(row=RowRef(3), item_type="demo_sog", section="demolition")
    bad = FormulaSpec(row=RowRef(4), item_type="not-a-tag", section="demolition")
    writes = resolve_cell_writes([good, bad])
    assert [w.cell_ref for w in writes] == ["J3", "L3"]
    assert resolve_spec(good)[0].value == "=C3"
