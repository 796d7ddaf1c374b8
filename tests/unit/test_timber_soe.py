from __future__ import annotations

import pytest

from calcsheet.classifiers.soe import (
    is_horizontal_timber_sheets,
    is_raker,
    is_soldier_pile,
    is_timber_brace,
    is_timber_raker,
    is_timber_sheeting,
    is_timber_soldier_pile,
    is_timber_waler,
    is_vertical_timber_sheets,
    is_waler,
)
from calcsheet.formulas.registry import generate, sum_fields
from calcsheet.models.items import Item
from calcsheet.parsers.soe import parse_soe_item
from calcsheet.processors.soe import GENERIC_SUBSECTIONS

"""Timber shoring members: classification, parsing and row formulas."""


def _item(text: str) -> Item:
    return Item(particulars=text, takeoff=4, unit="EA", parsed=parse_soe_item(text), raw_row_number=3)


def test_timber_members_do_not_land_in_steel_subsections():
    assert is_timber_waler("Timber waler 6x8") is True
    assert is_waler("Timber waler 6x8") is False
    assert is_timber_soldier_pile("Timber soldier pile 8x8 H=12'-0\"") is True
    assert is_soldier_pile("Timber soldier pile 8x8 H=12'-0\"") is False
    assert is_timber_raker("Timber raker 6x6") is True
    assert is_raker("Timber raker 6x6") is False
    assert is_timber_brace("Timber brace 4x6") is True


def test_oriented_sheets_are_not_plain_sheeting():
    assert is_vertical_timber_sheets("Vertical timber sheets H=8'-0\"") is True
    assert is_timber_sheeting("Vertical timber sheeting H=8'-0\"") is False
    assert is_horizontal_timber_sheets("Horizontal timber sheets H=6'-0\"") is True
    assert is_timber_sheeting("Timber sheeting H=6'-0\"") is True


@pytest.mark.parametrize(
    "text, tag",
    [
        ("Timber soldier pile 8x8 H=12'-0\"", "timber_soldier_pile"),
        ("Timber plank 3x10 H=4'-0\"", "timber_plank"),
        ("Timber waler 6x8", "timber_waler"),
        ("Timber raker 6x6", "timber_raker"),
        ("Timber brace 4x6 H=10'-0\"", "timber_brace"),
        ("Timber post 6x6 H=9'-0\"", "timber_post"),
        ("Vertical timber sheets H=8'-0\"", "vertical_timber_sheets"),
        ("Horizontal timber sheets H=6'-0\"", "horizontal_timber_sheets"),
        ("Timber stringer 6x8", "timber_stringer"),
    ],
)
def test_timber_types(text, tag):
    assert parse_soe_item(text).type == tag


def test_timber_height_is_not_rounded():
    brace = parse_soe_item("Timber brace 4x6 H=10'-3\"")
    assert brace.height_raw == pytest.approx(10.25)
    assert brace.calculated_height == pytest.approx(10.25)


def test_timber_formulas():
    each = generate("soe", "timber_brace", 12)
    assert (each.ft, each.qty_final) == ("H12*C12", "C12")
    waler = generate("soe", "timber_waler", 13)
    assert (waler.ft, waler.qty_final) == ("C13", "E13")
    assert generate("soe", "timber_raker", 14).ft == "C14*1.15"
    assert generate("soe", "timber_stringer", 15).ft == "C15"
    assert generate("soe", "vertical_timber_sheets", 16).sq_ft == "I16*H16"


def test_timber_sum_columns():
    assert sum_fields("soe", [_item("Timber post 6x6 H=9'-0\"")]) == ("ft", "qty_final")
    assert sum_fields("soe", [_item("Timber stringer 6x8")]) == ("ft",)
    assert sum_fields("soe", [_item("Horizontal timber sheets H=6'-0\"")]) == ("ft", "sq_ft")


def test_every_timber_subsection_is_wired():
    names = [name for name in GENERIC_SUBSECTIONS if "timber" in name.lower()]
    assert {
        "Timber soldier piles",
        "Timber planks",
        "Timber waler",
        "Timber raker",
        "Timber brace",
        "Timber post",
        "Vertical timber sheets",
        "Horizontal timber sheets",
        "Timber stringer",
    } <= set(names)
