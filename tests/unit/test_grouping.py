from __future__ import annotations

from calcsheet.models.items import Item, ParsedItem
from calcsheet.processors.foundation import group_mat_slab_items
from calcsheet.processors.grouping import (
    MERGED_SINGLES,
    extract_grouping_key,
    group_in_order,
    group_items_by_key,
    merge_similar_single_item_groups,
    merge_single_item_groups_if_all,
    merge_singletons_flat,
)


def _item(text: str, key: str | None = None, sub_type: str | None = None, row: int = 2) -> Item:
    return Item(
        particulars=text,
        takeoff=1.0,
        unit="SQ FT",
        parsed=ParsedItem(group_key=key, item_sub_type=sub_type),
        raw_row_number=row,
    )


def test_extract_grouping_key_rules():
    assert extract_grouping_key('Demo SOG 4" thick') == "THICK_4"
    assert extract_grouping_key("FW (1'-0\" x 10'-0\")") == "DIM_1'-0\""
    assert extract_grouping_key("Shotcrete H=6'-0\"") == "H_6'-0\""
    assert extract_grouping_key("Rock bolt @ 7'-0\" O.C.") == "SPACING_7'-0\""
    assert extract_grouping_key(None) == "OTHER"
    assert extract_grouping_key("plain text") == "OTHER"


def test_group_in_order_keeps_first_appearance_order():
    items = [_item("a", "K2"), _item("b", "K1"), _item("c", "K2")]
    groups = group_in_order(items)
    assert [g.group_key for g in groups] == ["K2", "K1"]
    assert [i.particulars for i in groups[0].items] == ["a", "c"]


def test_group_items_by_key_merges_singletons():
    items = [_item("a", "K1"), _item("b", "K2"), _item("c", "K1"), _item("d", "K3")]
    groups = group_items_by_key(items)
    assert [g.group_key for g in groups] == ["K1", MERGED_SINGLES]
    merged = groups[-1]
    assert merged.is_merged
    assert [i.particulars for i in merged.items] == ["b", "d"]


def test_group_items_by_key_single_singleton_stays():
    items = [_item("a", "K1"), _item("b", "K1"), _item("c", "K2")]
    assert [g.group_key for g in group_items_by_key(items)] == ["K1", "K2"]
    assert group_items_by_key([]) == []


def test_grouping_is_deterministic():
    items = [_item(t, k) for t, k in [("a", "X"), ("b", "Y"), ("c", "X"), ("d", "Z"), ("e", "W")]]
    first = group_items_by_key(items)
    second = group_items_by_key(list(items))
    assert first == second


def test_merge_single_item_groups_if_all():
    groups = group_in_order([_item("a", "K1"), _item("b", "K2")])
    merged = merge_single_item_groups_if_all(groups)
    assert len(merged) == 1
    assert merged[0].group_key == "K1_MERGED"
    assert len(merged[0].items) == 2

    mixed = group_in_order([_item("a", "K1"), _item("b", "K1"), _item("c", "K2")])
    assert merge_single_item_groups_if_all(mixed) == mixed


def test_merge_similar_single_item_groups_by_base_description():
    groups = group_in_order([
        _item("Pier (2'-0\"x2'-0\") H=4'", "P1"),
        _item("Pier (3'-0\"x3'-0\") H=5'", "P2"),
        _item("Corbel (1'x1')", "C1"),
    ])
    merged = merge_similar_single_item_groups(groups)
    keys = [g.group_key for g in merged]
    assert "Pier_MERGED" in keys
    assert "C1" in keys
    assert len(merged) == 2


def test_merge_singletons_flat_relabels_singletons():
    items = [_item("a", "K1"), _item("b", "K2"), _item("c", "K1"), _item("d", "K3")]
    out = merge_singletons_flat(items, key=lambda i: i.parsed.group_key)
    assert [i.particulars for i in out] == ["a", "c", "b", "d"]
    assert [i.parsed.group_key for i in out] == ["K1", "K1", "MERGED", "MERGED"]


def test_haunch_joins_preceding_mat_group():
    items = [
        _item("Mat 36\"", "H3.00", "mat"),
        _item("Haunch", None, "haunch"),
        _item("Mat 48\"", "H4.00", "mat"),
        _item("Mat 36\" again", "H3.00", "mat"),
        _item("Haunch 2", None, "haunch"),
    ]
    groups = group_mat_slab_items(items)
    assert [g.group_key for g in groups] == ["H3.00", "H4.00"]
    assert [i.particulars for i in groups[0].items] == ["Mat 36\"", "Haunch", "Mat 36\" again", "Haunch 2"]
    assert all(g.kind == "mat" for g in groups)


def test_leading_haunch_opens_its_own_group():
    groups = group_mat_slab_items([_item("Haunch", None, "haunch"), _item("Mat 36\"", "H3.00", "mat")])
    assert [g.group_key for g in groups] == ["HAUNCH", "H3.00"]
