from __future__ import annotations

import math

import pytest

from calcsheet.assembler.totals import (
    line_drill_label_ft,
    line_drill_total_ft,
    lifts,
    rock_excavation_totals,
    rock_item_quantities,
)
from calcsheet.models.items import Item, ParsedItem


def _rock(item_type: str, takeoff: float, length=None, width=None, height=None) -> Item:
    return Item(
        particulars=item_type,
        takeoff=takeoff,
        unit="EA",
        parsed=ParsedItem(type=item_type, length=length, width=width, height=height),
        raw_row_number=2,
        item_type=item_type,
    )


def test_lifts_round_up_in_two_foot_steps():
    assert lifts(0) == 0
    assert lifts(-1) == 0
    assert lifts(3) == 2
    assert lifts(4) == 2
    assert lifts(4.1) == 3


def test_rock_item_quantities():
    assert rock_item_quantities(_rock("sump_pit", 2)) == (32, pytest.approx(2.6))
    sq_ft, cy = rock_item_quantities(_rock("concrete_pier", 4, 3, 2, 9))
    assert sq_ft == 24
    assert cy == pytest.approx(8)
    assert rock_item_quantities(_rock("rock_exc", 270, height=2)) == (270, pytest.approx(20))
    assert rock_item_quantities(_rock("other", 5)) == (0, 0)


def test_rock_excavation_totals_sum_items():
    totals = rock_excavation_totals([_rock("rock_exc", 270, height=2), _rock("sump_pit", 2)])
    assert totals.total_sq_ft == pytest.approx(302)
    assert totals.total_cy == pytest.approx(22.6)


def test_line_drill_label_ft():
    assert line_drill_label_ft(_rock("sump_pit", 2)) == 16
    assert line_drill_label_ft(_rock("concrete_pier", 4, 3, 2, 4)) == 2 * (2 + 3) * 2 * 4
    assert line_drill_label_ft(_rock("sewage_pit_slab", 100, height=6)) == pytest.approx(3 * math.sqrt(100) * 4)


def test_line_drill_total_is_zero_without_line_drill_items():
    assert line_drill_total_ft([_rock("sump_pit", 2)], []) == 0


def test_line_drill_total_counts_both_faces():
    line_drill = [_rock("line_drilling", 50, height=6)]
    rock = [_rock("sump_pit", 2), _rock("rock_exc", 270, height=2)]
    # sump label 16 ft + 3 lifts * 50 ft; rock_exc rows are not mirrored
    assert line_drill_total_ft(rock, line_drill) == pytest.approx((16 + 150) * 2)
