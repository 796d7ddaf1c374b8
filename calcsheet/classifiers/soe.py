from __future__ import annotations

from .base import classifier, contains_any

"""Shoring of excavation classifiers.

Several keywords overlap (``waler`` shows up in supporting angle locations
and timber walers, ``raker`` in upper, lower and timber rakers, ``anchor`` in
rock anchors and tie backs), so each predicate states its own exclusions.
"""

__all__ = [
    "is_soldier_pile",
    "is_primary_secant_pile",
    "is_secondary_secant_pile",
    "is_tangent_pile",
    "is_sheet_pile",
    "is_timber_lagging",
    "is_timber_sheeting",
    "is_timber_soldier_pile",
    "is_timber_plank",
    "is_timber_waler",
    "is_timber_raker",
    "is_timber_brace",
    "is_timber_post",
    "is_vertical_timber_sheets",
    "is_horizontal_timber_sheets",
    "is_timber_stringer",
    "is_waler",
    "is_raker",
    "is_upper_raker",
    "is_lower_raker",
    "is_stand_off",
    "is_kicker",
    "is_channel",
    "is_roll_chock",
    "is_stud_beam",
    "is_inner_corner_brace",
    "is_knee_brace",
    "is_supporting_angle",
    "is_parging",
    "is_heel_block",
    "is_underpinning",
    "is_rock_anchor",
    "is_rock_bolt",
    "is_anchor",
    "is_tie_back",
    "is_concrete_soil_retention_pier",
    "is_guide_wall",
    "is_dowel_bar",
    "is_rock_pin",
    "is_shotcrete",
    "is_permission_grouting",
    "is_button",
    "is_rock_stabilization",
    "is_form_board",
    "is_drilled_hole_grout",
    "has_backpacking",
]


@classifier
def is_soldier_pile(text: str) -> bool:
    if "supporting angle" in text:
        return False
    return "soldier pile" in text and not contains_any(text, "secant", "tangent", "timber")


@classifier
def is_primary_secant_pile(text: str) -> bool:
    return "primary secant pile" in text


@classifier
def is_secondary_secant_pile(text: str) -> bool:
    return "secondary secant pile" in text


@classifier
def is_tangent_pile(text: str) -> bool:
    return "tangent pile" in text


@classifier
def is_sheet_pile(text: str) -> bool:
    return "sheet pile" in text


@classifier
def is_timber_lagging(text: str) -> bool:
    return "timber lagging" in text and "supporting angle" not in text


@classifier
def is_timber_sheeting(text: str) -> bool:
    return "timber sheeting" in text and not contains_any(text, "vertical", "horizontal")


@classifier
def is_timber_soldier_pile(text: str) -> bool:
    return "timber soldier pile" in text


@classifier
def is_timber_plank(text: str) -> bool:
    return "timber plank" in text


@classifier
def is_timber_waler(text: str) -> bool:
    return "timber waler" in text and "supporting angle" not in text


@classifier
def is_timber_raker(text: str) -> bool:
    return "timber raker" in text


@classifier
def is_timber_brace(text: str) -> bool:
    return "timber brace" in text


@classifier
def is_timber_post(text: str) -> bool:
    return "timber post" in text


@classifier
def is_vertical_timber_sheets(text: str) -> bool:
    return "vertical timber sheet" in text


@classifier
def is_horizontal_timber_sheets(text: str) -> bool:
    return "horizontal timber sheet" in text


@classifier
def is_timber_stringer(text: str) -> bool:
    return "timber stringer" in text


@classifier
def is_waler(text: str) -> bool:
    return "waler" in text and not contains_any(text, "supporting angle", "timber")


@classifier
def is_raker(text: str) -> bool:
    return "raker" in text and not contains_any(text, "upper", "lower", "timber")


@classifier
def is_upper_raker(text: str) -> bool:
    return "upper raker" in text


@classifier
def is_lower_raker(text: str) -> bool:
    return "lower raker" in text


@classifier
def is_stand_off(text: str) -> bool:
    return "stand off" in text


@classifier
def is_kicker(text: str) -> bool:
    return "kicker" in text


@classifier
def is_channel(text: str) -> bool:
    return "channel" in text and "bollard" not in text


@classifier
def is_roll_chock(text: str) -> bool:
    return "roll chock" in text


@classifier
def is_stud_beam(text: str) -> bool:
    return "stud beam" in text


@classifier
def is_inner_corner_brace(text: str) -> bool:
    return "inner corner brace" in text


@classifier
def is_knee_brace(text: str) -> bool:
    return "knee brace" in text


@classifier
def is_supporting_angle(text: str) -> bool:
    return "supporting angle" in text


@classifier
def is_parging(text: str) -> bool:
    return "parging" in text


@classifier
def is_heel_block(text: str) -> bool:
    return "heel block" in text


@classifier
def is_underpinning(text: str) -> bool:
    return "underpinning" in text


@classifier
def is_rock_anchor(text: str) -> bool:
    return "rock anchor" in text


@classifier
def is_rock_bolt(text: str) -> bool:
    return "rock bolt" in text


@classifier
def is_anchor(text: str) -> bool:
    if contains_any(text, "rock anchor", "tie back", "tieback", "hollow down anchor"):
        return False
    return "anchor" in text


@classifier
def is_tie_back(text: str) -> bool:
    return contains_any(text, "tie back", "tieback")


@classifier
def is_concrete_soil_retention_pier(text: str) -> bool:
    return "concrete soil retention pier" in text


@classifier
def is_guide_wall(text: str) -> bool:
    return "guide wall" in text


@classifier
def is_dowel_bar(text: str) -> bool:
    return "dowel bar" in text


@classifier
def is_rock_pin(text: str) -> bool:
    return "rock pin" in text


@classifier
def is_shotcrete(text: str) -> bool:
    return "shotcrete" in text


@classifier
def is_permission_grouting(text: str) -> bool:
    return contains_any(text, "permission grouting", "permeation grouting")


@classifier
def is_button(text: str) -> bool:
    return "button" in text


@classifier
def is_rock_stabilization(text: str) -> bool:
    return "rock stabilization" in text


@classifier
def is_form_board(text: str) -> bool:
    return "form board" in text


@classifier
def is_drilled_hole_grout(text: str) -> bool:
    return "drilled hole grout" in text


@classifier
def has_backpacking(text: str) -> bool:
    return "w/backpacking" in text
