from __future__ import annotations

import pytest

from calcsheet.assembler.builder import AlignmentError, SheetBuilder
from calcsheet.models.sheet import SHEET_WIDTH, FormulaSpec, RowRecord, RowRef


def test_header_row_is_padded_to_sheet_width():
    b = SheetBuilder(["Estimate", "Particulars"])
    assert len(b) == 1
    assert b.rows[0][:2] == ["Estimate", "Particulars"]
    assert len(b.rows[0]) == SHEET_WIDTH


def test_emit_points_spec_at_its_row():
    b = SheetBuilder([])
    b.blank()
    ref = b.emit(RowRecord(particulars="Demo SOG", takeoff=10, unit="SQ FT"), "demo_sog", "demolition")
    assert ref == RowRef(3)
    assert b.formulas[-1].row_number == 3
    assert b.rows[2][1:4] == ["Demo SOG", 10, "SQ FT"]
    b.check_alignment()


def test_raw_row_number_becomes_fourteenth_cell():
    cells = RowRecord(particulars="x", raw_row_number=17).to_cells()
    assert len(cells) == SHEET_WIDTH + 1
    assert cells[-1] == 17
    assert len(RowRecord.blank().to_cells()) == SHEET_WIDTH


def test_spec_for_an_earlier_row_needs_deferred():
    b = SheetBuilder([])
    header = b.append_row(RowRecord(estimate="Foundation"))
    b.blank()
    spec = FormulaSpec(row=header, item_type="foundation_cy_total", section="foundation")
    with pytest.raises(AlignmentError):
        b.append_formula(spec)
    b.append_formula(spec, deferred=True)
    assert b.formulas == [spec]


def test_spec_outside_the_sheet_is_rejected():
    b = SheetBuilder([])
    with pytest.raises(AlignmentError):
        b.append_formula(FormulaSpec(row=RowRef(5), item_type="x", section="y"), deferred=True)


def test_last_row_on_empty_builder():
    with pytest.raises(AlignmentError):
        _ = SheetBuilder().last_row
