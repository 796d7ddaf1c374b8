from __future__ import annotations

import pytest

from calcsheet.classifiers.demolition import demolition_subsection, is_demolition_item
from calcsheet.classifiers.excavation import (
    is_backfill_item,
    is_excavation_item,
    is_line_drill_item,
    is_mud_slab_item,
    is_rock_excavation_item,
)
from calcsheet.classifiers.foundation import is_misc_foundation_pile, is_sog
from calcsheet.classifiers.soe import (
    has_backpacking,
    is_anchor,
    is_raker,
    is_soldier_pile,
    is_supporting_angle,
    is_tie_back,
    is_upper_raker,
    is_waler,
)


def test_waler_excludes_supporting_angle_locations():
    assert is_waler("2 - Supporting angle @ waler line") is False
    assert is_supporting_angle("2 - Supporting angle @ waler line") is True
    assert is_waler("W12x40 Waler") is True


def test_raker_variants_do_not_overlap():
    assert is_raker("W10x33 Raker") is True
    assert is_raker("W10x33 Upper raker") is False
    assert is_upper_raker("W10x33 Upper raker") is True


def test_anchor_excludes_rock_anchors_and_tie_backs():
    assert is_anchor("Rock anchor (Free length=10'-0\")") is False
    assert is_anchor("Tieback anchor") is False
    assert is_anchor("Anchor (Free length=10'-0\")") is True
    assert is_tie_back("Tieback anchor") is True


def test_soldier_pile_classifier():
    assert is_soldier_pile("Drilled soldier pile 24Ø x1 H=27'-6\"") is True
    assert is_soldier_pile("Supporting angle @ soldier pile") is False
    assert is_soldier_pile("Secant soldier pile") is False


@pytest.mark.parametrize("value", [None, "", 12, 3.5])
def test_classifiers_reject_non_text(value):
    assert is_waler(value) is False
    assert is_demolition_item(value) is False
    assert is_excavation_item(value) is False


def test_backpacking_marker():
    assert has_backpacking("Timber lagging w/backpacking H=10'") is True
    assert has_backpacking("Timber lagging H=10'") is False


def test_demolition_classifier_and_subsections():
    assert is_demolition_item('Demo SOG 4" thick') is True
    assert is_demolition_item("Demolition of things") is False
    assert demolition_subsection('Demo SOG 4" thick') == "Demo slab on grade"
    assert demolition_subsection("Demo FW (1'-0\"x8'-0\")") == "Demo foundation wall"
    assert demolition_subsection("Demo isolated footing (4'x4'x2')") == "Demo isolated footing"
    assert demolition_subsection("Demo something else") is None


def test_earthwork_classifiers():
    assert is_excavation_item("Exc (H=10'-0\")") is True
    assert is_excavation_item("Backfill (H=5'-0\")") is False
    assert is_excavation_item("Rock excavation (H=4'-0\")") is False
    assert is_backfill_item("Backfill (H=5'-0\")") is True
    assert is_backfill_item("Exc & backfill (H=5'-0\")") is True
    assert is_mud_slab_item('SOG 6" w/ 4" mud slab') is True
    assert is_rock_excavation_item("Rock excavation (H=4'-0\")") is True
    assert is_line_drill_item("Line drill (H=8'-0\")") is True


def test_foundation_classifiers_ignore_demolition_and_named_piles():
    assert is_sog('SOG 6" thick') is True
    assert is_sog('Demo SOG 6" thick') is False
    assert is_misc_foundation_pile("Timber pile") is True
    assert is_misc_foundation_pile("Drilled soldier pile 24Ø x1") is False
    assert is_misc_foundation_pile("Helical pile") is False
