from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from ..classifiers import soe as c
from ..classifiers.base import Classifier
from ..models.items import Group, Item, ParsedItem
from ..parsers import soe as p
from .columns import RawLine
from .common import collect_items, simple_item
from .grouping import group_in_order
from .tracker import RowClaimTracker

__all__ = [
    "HP_UNIQUE",
    "SOE_SUBSECTIONS",
    "GENERIC_SUBSECTIONS",
    "process_soldier_pile_items",
    "order_soldier_pile_groups",
    "process_soe_subsection",
    "process_supporting_angle_items",
    "process_soe_items",
]

logger = logging.getLogger(__name__)

HP_UNIQUE = "HP-UNIQUE"

Parser = Callable[[str], ParsedItem]


def _soldier_pile(line: RawLine) -> Item | None:
    parsed = p.parse_soldier_pile(line.text)
    if parsed.type is None:
        return None
    item = simple_item(line, parsed)
    return item.with_(weight=p.calculate_pile_weight(parsed))


def _group_sort_key(group: Group) -> tuple:
    parsed = group.parsed
    if group.kind == "drilled":
        return (0, parsed.diameter, parsed.thickness, p.PATTERN_ORDER.get(parsed.pattern, 0), 0.0)
    return (1, 0 if group.group_key == HP_UNIQUE else 1, 0.0, 0, parsed.calculated_height)


def order_soldier_pile_groups(groups: Sequence[Group]) -> list[Group]:
    """Drilled groups first (diameter, thickness, E < E+RS < RS < H), then HP
    with ``HP-UNIQUE`` leading and the rest by calculated height.

    HP groups of a single pile are pooled into ``HP-UNIQUE``.
    """
    drilled = [g for g in groups if g.kind == "drilled"]
    hp = [g for g in groups if g.kind == "hp"]
    singles = [item for g in hp if len(g) == 1 for item in g.items]
    regrouped: list[Group] = []
    if singles:
        regrouped.append(Group(group_key=HP_UNIQUE, items=tuple(singles), parsed=singles[0].parsed, kind="hp"))
    regrouped.extend(g for g in hp if len(g) > 1)
    return sorted(drilled + regrouped, key=_group_sort_key)


def process_soldier_pile_items(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None = None,
) -> list[Group]:
    items = collect_items(rows, headers, c.is_soldier_pile, _soldier_pile, tracker=tracker)
    groups = [
        g.with_(kind=g.parsed.type)
        for g in group_in_order(items, key=lambda i: i.parsed.group_key)
    ]
    return order_soldier_pile_groups(groups)


def _generic(fallback: str) -> Callable[[RawLine], Item]:
    def build(line: RawLine) -> Item:
        parsed = p.parse_soe_item(line.text)
        if parsed.type is None:
            parsed = parsed.with_(type=fallback)
        return simple_item(line, parsed, read_count=True)

    return build


def _with_parser(parse: Parser) -> Callable[[RawLine], Item]:
    def build(line: RawLine) -> Item:
        parsed = parse(line.text)
        item = simple_item(line, parsed, read_count=True)
        if parsed.qty is not None:
            item = item.with_(qty=parsed.qty)
        return item

    return build


def _typed(parse: Callable[[str, str], ParsedItem], item_type: str) -> Parser:
    return lambda text: parse(text, item_type)


GENERIC_SUBSECTIONS: dict[str, tuple[Classifier, str]] = {
    "Primary secant piles": (c.is_primary_secant_pile, "primary_secant"),
    "Secondary secant piles": (c.is_secondary_secant_pile, "secondary_secant"),
    "Tangent piles": (c.is_tangent_pile, "tangent"),
    "Sheet pile": (c.is_sheet_pile, "sheet_pile"),
    "Timber lagging": (c.is_timber_lagging, "timber_lagging"),
    "Timber sheeting": (c.is_timber_sheeting, "timber_sheeting"),
    "Timber soldier piles": (c.is_timber_soldier_pile, "timber_soldier_pile"),
    "Timber planks": (c.is_timber_plank, "timber_plank"),
    "Timber waler": (c.is_timber_waler, "timber_waler"),
    "Timber raker": (c.is_timber_raker, "timber_raker"),
    "Timber brace": (c.is_timber_brace, "timber_brace"),
    "Timber post": (c.is_timber_post, "timber_post"),
    "Vertical timber sheets": (c.is_vertical_timber_sheets, "vertical_timber_sheets"),
    "Horizontal timber sheets": (c.is_horizontal_timber_sheets, "horizontal_timber_sheets"),
    "Timber stringer": (c.is_timber_stringer, "timber_stringer"),
    "Waler": (c.is_waler, "waler"),
    "Raker": (c.is_raker, "raker"),
    "Upper Raker": (c.is_upper_raker, "upper_raker"),
    "Lower Raker": (c.is_lower_raker, "lower_raker"),
    "Stand off": (c.is_stand_off, "stand_off"),
    "Kicker": (c.is_kicker, "kicker"),
    "Channel": (c.is_channel, "channel"),
    "Roll chock": (c.is_roll_chock, "roll_chock"),
    "Stud beam": (c.is_stud_beam, "stud_beam"),
    "Inner corner brace": (c.is_inner_corner_brace, "inner_corner_brace"),
    "Knee brace": (c.is_knee_brace, "knee_brace"),
}

# template subsection -> (classifier, item builder)
SOE_SUBSECTIONS: dict[str, tuple[Classifier, Callable[[RawLine], Item]]] = {
    name: (pred, _generic(tag)) for name, (pred, tag) in GENERIC_SUBSECTIONS.items()
}
SOE_SUBSECTIONS.update({
    "Supporting angle": (c.is_supporting_angle, _with_parser(p.parse_supporting_angle)),
    "Parging": (c.is_parging, _with_parser(_typed(p.parse_surface_item, "parging"))),
    "Heel blocks": (c.is_heel_block, _with_parser(_typed(p.parse_bracket_item, "heel_block"))),
    "Underpinning": (c.is_underpinning, _with_parser(_typed(p.parse_bracket_item, "underpinning"))),
    "Rock anchors": (c.is_rock_anchor, _with_parser(_typed(p.parse_anchor, "rock_anchor"))),
    "Rock bolts": (c.is_rock_bolt, _with_parser(p.parse_rock_bolt)),
    "Anchor": (c.is_anchor, _with_parser(_typed(p.parse_anchor, "anchor"))),
    "Tie back": (c.is_tie_back, _with_parser(_typed(p.parse_anchor, "tie_back"))),
    "Concrete soil retention piers": (
        c.is_concrete_soil_retention_pier,
        _with_parser(_typed(p.parse_bracket_item, "concrete_soil_retention_pier")),
    ),
    "Guide wall": (c.is_guide_wall, _with_parser(p.parse_guide_wall)),
    "Dowel bar": (c.is_dowel_bar, _with_parser(_typed(p.parse_dowel, "dowel_bar"))),
    "Rock pins": (c.is_rock_pin, _with_parser(_typed(p.parse_dowel, "rock_pin"))),
    "Shotcrete": (c.is_shotcrete, _with_parser(_typed(p.parse_surface_item, "shotcrete"))),
    "Permission grouting": (c.is_permission_grouting, _with_parser(_typed(p.parse_surface_item, "permission_grouting"))),
    "Buttons": (c.is_button, _with_parser(_typed(p.parse_bracket_item, "button"))),
    "Rock stabilization": (c.is_rock_stabilization, _with_parser(_typed(p.parse_surface_item, "rock_stabilization"))),
    "Form board": (c.is_form_board, _with_parser(_typed(p.parse_surface_item, "form_board"))),
    "Drilled hole grout": (c.is_drilled_hole_grout, _with_parser(_typed(p.parse_surface_item, "drilled_hole_grout"))),
})


def process_soe_subsection(
    name: str,
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None = None,
) -> list[Item]:
    predicate, build = SOE_SUBSECTIONS[name]
    return collect_items(rows, headers, predicate, build, tracker=tracker)


def process_supporting_angle_items(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None = None,
) -> list[Group]:
    """Supporting angles grouped by the location after ``@`` (``Other`` when absent)."""
    items = process_soe_subsection("Supporting angle", rows, headers, tracker)
    return [
        g.with_(label=g.group_key, kind="supporting_angle")
        for g in group_in_order(items, key=lambda i: i.parsed.group_key or "Other")
    ]


def process_soe_items(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None = None,
) -> dict[str, list[Item]]:
    """Items of every flat SOE subsection keyed by template subsection name."""
    out = {
        name: process_soe_subsection(name, rows, headers, tracker)
        for name in SOE_SUBSECTIONS
        if name != "Supporting angle"
    }
    logger.debug(f"soe items: { {k: len(v) for k, v in out.items() if v} }")
    return out
