from __future__ import annotations

import pytest

from calcsheet.classifiers.foundation import is_stelcor_pile
from calcsheet.models.items import Item, ParsedItem
from calcsheet.parsers.foundation import parse_stelcor_pile
from calcsheet.processors.foundation import (
    FOUNDATION_SUBSECTIONS,
    blank_row_blocks,
    process_drilled_foundation_pile_items,
    process_foundation_items,
    split_trailing_influence,
)
from calcsheet.processors.tracker import RowClaimTracker

"""Blank-row and influence grouping of foundation piles."""

STELCOR = "Stelcor drilled displacement pile"
SINGLE = "Drilled foundation pile 24\"Ø x0.5 H=30'-0\""
DUAL = "Drilled foundation pile 24\"Ø x0.5 & 20\"Ø H=30'-0\""


def _row(text, total="", unit="EA", influence="") -> list:
    return [1, text, total, unit, "", "", influence]


@pytest.fixture()
def pile_headers(headers) -> list[str]:
    return [*headers, "Influence"]


def _item(name: str, influenced: bool) -> Item:
    return Item(particulars=name, takeoff=1, unit="EA", parsed=ParsedItem(type="cfa_pile", has_influence=influenced), raw_row_number=2)


def test_split_without_trailing_influence_is_one_group():
    items = [_item("a", False), _item("b", True), _item("c", False)]
    groups = split_trailing_influence(items)
    assert [g.group_key for g in groups] == ["ALL"]
    assert [i.particulars for i in groups[0].items] == ["a", "b", "c"]
    assert split_trailing_influence([]) == []


def test_split_moves_trailing_influenced_run():
    items = [_item("a", False), _item("b", True), _item("c", True)]
    remaining, influence = split_trailing_influence(items)
    assert remaining.group_key == "REMAINING"
    assert [i.particulars for i in remaining.items] == ["a"]
    assert influence.group_key == "INFLUENCE"
    assert influence.has_influ is True
    assert [i.particulars for i in influence.items] == ["b", "c"]


def test_split_all_influenced():
    groups = split_trailing_influence([_item("a", True), _item("b", True)])
    assert [g.group_key for g in groups] == ["INFLUENCE"]


def test_stelcor_blank_row_starts_a_new_group(pile_headers):
    rows = [
        _row(f"{STELCOR} 12\"Ø x0.5 H=40'-0\"", 6),
        _row(f"{STELCOR} 12\"Ø x0.5 H=40'-0\"", 4),
        _row(""),
        _row(f"{STELCOR} 12\"Ø x0.5 H=35'-0\"", 2),
    ]
    groups = process_foundation_items(rows, pile_headers)[STELCOR]
    assert len(groups) == 2
    assert [len(g.items) for g in groups] == [2, 1]
    assert [g.items[0].takeoff for g in groups] == [6, 2]


def test_stelcor_influence_split_stays_inside_its_block(pile_headers):
    rows = [
        _row(f"{STELCOR} 12\"Ø x0.5 H=40'-0\"", 6),
        _row(f"{STELCOR} 12\"Ø x0.5 H=40'-0\" influence", 3),
        _row(""),
        _row(f"{STELCOR} 12\"Ø x0.5 H=35'-0\"", 2),
    ]
    groups = FOUNDATION_SUBSECTIONS[STELCOR](rows, pile_headers, None)
    assert [g.group_key for g in groups] == ["REMAINING", "INFLUENCE", "ALL"]
    assert groups[1].has_influ is True
    assert groups[2].items[0].takeoff == 2


def test_blank_row_blocks_split_on_structure_and_other_rows(pile_headers):
    rows = [
        _row(f"{STELCOR} 12\"Ø x0.5 H=40'-0\"", 6),
        _row(f"{STELCOR} H=40'-0\"", 1),
        _row("Pile cap (4'-0\" x 4'-0\" x 3'-0\")", 2),
        _row(f"{STELCOR} H=30'-0\"", 5),
    ]
    tracker = RowClaimTracker()
    blocks = blank_row_blocks(rows, pile_headers, is_stelcor_pile, parse_stelcor_pile, tracker=tracker)
    assert [[i.takeoff for i in block] for block in blocks] == [[6], [1], [5]]
    assert tracker.used_indices == frozenset({0, 1, 3})


def test_blank_row_blocks_need_required_headers():
    assert blank_row_blocks([_row(f"{STELCOR} H=30'-0\"")], ["Page"], is_stelcor_pile, parse_stelcor_pile) == []


def test_drilled_piles_collapse_each_block_to_its_first_row(pile_headers):
    rows = [
        _row(SINGLE, 10),
        _row(SINGLE, 12),
        _row(SINGLE, 3),
        _row(""),
        _row(DUAL, 4),
        _row("Drilled foundation pile 24\"Ø x0.5 H=25'-0\"", 7, influence="Influ. zone"),
    ]
    groups = process_drilled_foundation_pile_items(rows, pile_headers)
    assert [g.kind for g in groups] == ["single", "dual", "single"]
    assert all(len(g.items) == 1 for g in groups)
    # the first row's own total is left out
    assert groups[0].items[0].takeoff == 15
    assert groups[1].items[0].takeoff == 0
    assert [g.has_influ for g in groups] == [False, False, True]


def test_drilled_pile_claims_every_grouped_row(pile_headers):
    rows = [_row(SINGLE, 10), _row("Mystery item"), _row(SINGLE, 5)]
    tracker = RowClaimTracker()
    groups = process_drilled_foundation_pile_items(rows, pile_headers, tracker)
    assert len(groups) == 2
    assert tracker.used_indices == frozenset({0, 2})
