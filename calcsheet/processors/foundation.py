from __future__ import annotations

import logging
import string
from collections.abc import Callable, Sequence
from typing import Any

from ..classifiers import foundation as c
from ..classifiers.base import Classifier
from ..models.items import Group, Item, ParsedItem
from ..parsers import foundation as p
from .columns import RawLine, iter_lines, resolve_columns
from .common import collect_items, simple_item
from .grouping import group_in_order, merge_single_item_groups_if_all
from .tracker import RowClaimTracker

"""Foundation processors.

Every subsection yields a list of Groups; each group becomes one run of item
rows closed by a sum row. How items are grouped differs per subsection:

- blank-row boundaries (drilled foundation piles, stelcor)
- trailing influence run (driven, CFA; stelcor within each blank-row run)
- group key with all-singleton collapse (helical, footings, beams, walls)
- sub-type buckets (pits, tanks, traps)
- mat + following haunch (mat slab)
- one group per stair (stairs on grade)
"""

__all__ = [
    "FoundationProcessor",
    "FOUNDATION_SUBSECTIONS",
    "STAIR_IDENTIFIERS",
    "process_drilled_foundation_pile_items",
    "split_trailing_influence",
    "blank_row_blocks",
    "group_pit_items",
    "group_mat_slab_items",
    "group_stairs_on_grade",
    "process_misc_pile_items",
    "process_buttress_items",
    "process_foundation_items",
]

logger = logging.getLogger(__name__)

FoundationProcessor = Callable[[Sequence[Sequence[Any]], Sequence[Any], "RowClaimTracker | None"], list[Group]]

STAIR_IDENTIFIERS = string.ascii_uppercase


def _parsed(parse: Callable[[str], ParsedItem]) -> Callable[[RawLine], Item]:
    return lambda line: simple_item(line, parse(line.text))


def _items(rows, headers, tracker, predicate: Classifier, parse: Callable[[str], ParsedItem]) -> list[Item]:
    return collect_items(rows, headers, predicate, _parsed(parse), tracker=tracker)


def _key(item: Item) -> str:
    return item.parsed.group_key or "OTHER"


def _single_group(items: Sequence[Item], key: str) -> list[Group]:
    if not items:
        return []
    return [Group(group_key=key, items=tuple(items), parsed=items[0].parsed)]


def _flat(predicate: Classifier, parse: Callable[[str], ParsedItem], key: str) -> FoundationProcessor:
    def process(rows, headers, tracker=None):
        return _single_group(_items(rows, headers, tracker, predicate, parse), key)

    return process


def _keyed(predicate: Classifier, parse: Callable[[str], ParsedItem]) -> FoundationProcessor:
    def process(rows, headers, tracker=None):
        items = _items(rows, headers, tracker, predicate, parse)
        return merge_single_item_groups_if_all(group_in_order(items, _key))

    return process


def _has_influ_note(line: RawLine) -> bool:
    return line.influence is not None and "influ" in str(line.influence).lower()


def process_drilled_foundation_pile_items(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None = None,
) -> list[Group]:
    """Drilled piles grouped by blank-row boundaries.

    A blank Digitizer Item cell, a row of another category, or a change
    between single and dual sections closes the running group. Each group
    collapses to its first item; that item's takeoff is the sum of the
    totals of the rows after it (the first row's own total is not counted).
    """
    cols = resolve_columns(headers)
    if cols is None:
        return []
    groups: list[Group] = []
    current: Group | None = None

    def close() -> None:
        nonlocal current
        if current is not None:
            groups.append(current)
            current = None

    for line in iter_lines(rows, cols):
        if line.is_blank_text or not c.is_drilled_foundation_pile(line.text):
            close()
            continue
        parsed = p.parse_drilled_foundation_pile(line.text)
        has_influ = _has_influ_note(line)
        if tracker is not None:
            tracker.mark_used(line.index)
        if current is not None and current.parsed.is_dual_diameter != parsed.is_dual_diameter:
            close()
        if current is None:
            first = simple_item(line, parsed).with_(takeoff=0.0)
            current = Group(
                group_key=parsed.group_key or "OTHER",
                items=(first,),
                parsed=parsed,
                kind="dual" if parsed.is_dual_diameter else "single",
                has_influ=has_influ,
            )
            continue
        first = current.items[0]
        current = current.with_(
            items=(first.with_(takeoff=first.takeoff_value + line.total),),
            has_influ=current.has_influ or has_influ,
        )
    close()
    logger.debug(f"drilled foundation pile groups: {len(groups)}")
    return groups


def split_trailing_influence(items: Sequence[Item]) -> list[Group]:
    """One group, or ``REMAINING`` + ``INFLUENCE`` when the last item is influenced.

    The influence group is the trailing run of influenced items.
    """
    if not items:
        return []
    if not items[-1].parsed.has_influence:
        return [Group(group_key="ALL", items=tuple(items), parsed=items[0].parsed)]
    cut = len(items)
    while cut > 0 and items[cut - 1].parsed.has_influence:
        cut -= 1
    remaining, influenced = items[:cut], items[cut:]
    groups = []
    if remaining:
        groups.append(Group(group_key="REMAINING", items=tuple(remaining), parsed=remaining[0].parsed))
    groups.append(Group(group_key="INFLUENCE", items=tuple(influenced), parsed=influenced[0].parsed, has_influ=True))
    return groups


def _influence_split(predicate: Classifier, parse: Callable[[str], ParsedItem]) -> FoundationProcessor:
    def process(rows, headers, tracker=None):
        return split_trailing_influence(_items(rows, headers, tracker, predicate, parse))

    return process


def _pipe_structure(parsed: ParsedItem) -> bool:
    return parsed.diameter is not None


def blank_row_blocks(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    predicate: Classifier,
    parse: Callable[[str], ParsedItem],
    *,
    tracker: RowClaimTracker | None = None,
    structure: Callable[[ParsedItem], Any] = _pipe_structure,
) -> list[list[Item]]:
    """Runs of matching rows.

    A blank Digitizer Item cell, a row of another category, or a change in
    ``structure(parsed)`` ends the current run.
    """
    cols = resolve_columns(headers)
    if cols is None:
        return []
    blocks: list[list[Item]] = []
    current: list[Item] = []
    for line in iter_lines(rows, cols):
        if line.is_blank_text or not predicate(line.text):
            if current:
                blocks.append(current)
            current = []
            continue
        parsed = parse(line.text)
        if current and structure(current[-1].parsed) != structure(parsed):
            blocks.append(current)
            current = []
        current.append(simple_item(line, parsed))
        if tracker is not None:
            tracker.mark_used(line.index)
    if current:
        blocks.append(current)
    return blocks


def _blocks_then_influence(predicate: Classifier, parse: Callable[[str], ParsedItem]) -> FoundationProcessor:
    def process(rows, headers, tracker=None):
        blocks = blank_row_blocks(rows, headers, predicate, parse, tracker=tracker)
        return [group for block in blocks for group in split_trailing_influence(block)]

    return process


def _misc_pile(line: RawLine) -> Item | None:
    parsed = p.try_match_pile_structure(line.text)
    if parsed is None:
        return None
    item = simple_item(line, parsed)
    return item.with_(takeoff=line.total_or_blank)


def process_misc_pile_items(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None = None,
) -> list[Group]:
    """Pile rows no earlier step claimed, parsed with the first matching pile family.

    Rows whose notation fits no family stay unclaimed.
    """
    items = collect_items(rows, headers, c.is_misc_foundation_pile, _misc_pile, tracker=tracker, skip_claimed=True)
    return _single_group(items, "MISC")


def process_buttress_items(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None = None,
) -> list[Group]:
    """Only the last buttress row is kept; every matching row is claimed."""
    items = _items(rows, headers, tracker, c.is_buttress, p.parse_buttress)
    return _single_group(items[-1:], "BUTTRESS")


def group_pit_items(items: Sequence[Item]) -> list[Group]:
    """Bucket by sub-type in order of appearance; walls and slopes split further by size."""
    groups: list[Group] = []
    by_sub_type: dict[str | None, list[Item]] = {}
    for item in items:
        by_sub_type.setdefault(item.parsed.item_sub_type, []).append(item)
    for sub_type, members in by_sub_type.items():
        kind = sub_type or "other"
        if sub_type in ("wall", "slope_transition"):
            for g in group_in_order(members, _key):
                groups.append(g.with_(group_key=f"{kind}:{g.group_key}", kind=kind))
        else:
            groups.append(Group(group_key=kind, items=tuple(members), parsed=members[0].parsed, kind=kind))
    return groups


def _pits(predicate: Classifier, parse: Callable[[str], ParsedItem]) -> FoundationProcessor:
    def process(rows, headers, tracker=None):
        return group_pit_items(_items(rows, headers, tracker, predicate, parse))

    return process


def group_mat_slab_items(items: Sequence[Item]) -> list[Group]:
    """Mats group by height key; a haunch joins the group of the mat right before it.

    A haunch ahead of any mat opens its own group so no haunch is dropped.
    """
    order: list[str] = []
    buckets: dict[str, list[Item]] = {}
    last_key: str | None = None
    for item in items:
        if item.parsed.item_sub_type == "haunch":
            key = last_key or "HAUNCH"
        else:
            key = last_key = _key(item)
        if key not in buckets:
            order.append(key)
            buckets[key] = []
        buckets[key].append(item)
    return [Group(group_key=k, items=tuple(buckets[k]), parsed=buckets[k][0].parsed, kind="mat") for k in order]


def _mat_slab(rows, headers, tracker=None) -> list[Group]:
    return group_mat_slab_items(_items(rows, headers, tracker, c.is_mat_slab, p.parse_mat_slab))


def _sog_or_rog(line: RawLine) -> Item:
    if c.is_sog(line.text):
        return simple_item(line, p.parse_sog(line.text))
    return simple_item(line, p.parse_rog(line.text))


def _sog(rows, headers, tracker=None) -> list[Group]:
    items = collect_items(rows, headers, lambda t: c.is_sog(t) or c.is_rog(t), _sog_or_rog, tracker=tracker)
    return group_in_order(items, _key)


def group_stairs_on_grade(items: Sequence[Item]) -> list[Group]:
    """One group per stairs item; landings attach to the last ``len(landings)`` stairs.

    Groups are labelled A..Z, then ``Group<n>``.
    """
    stairs = [i for i in items if i.parsed.item_sub_type == "stairs"]
    landings = [i for i in items if i.parsed.item_sub_type == "landings"]
    offset = len(stairs) - len(landings)
    groups: list[Group] = []
    for idx, stair in enumerate(stairs):
        members: list[Item] = []
        landing_idx = idx - offset
        if 0 <= landing_idx < len(landings):
            members.append(landings[landing_idx])
        members.append(stair)
        label = STAIR_IDENTIFIERS[idx] if idx < len(STAIR_IDENTIFIERS) else f"Group{idx + 1}"
        groups.append(
            Group(
                group_key=stair.parsed.group_key or "NO_AT",
                items=tuple(members),
                parsed=stair.parsed,
                kind="stairs",
                label=label,
                extra={"has_landings": len(members) > 1},
            )
        )
    return groups


def _stairs(rows, headers, tracker=None) -> list[Group]:
    return group_stairs_on_grade(_items(rows, headers, tracker, c.is_stairs_on_grade, p.parse_stairs_on_grade))


# template subsection -> processor; "Piles" is filled by the misc pile step
FOUNDATION_SUBSECTIONS: dict[str, FoundationProcessor] = {
    "Drilled foundation pile": process_drilled_foundation_pile_items,
    "Helical foundation pile": _keyed(c.is_helical_foundation_pile, p.parse_helical_foundation_pile),
    "Driven foundation pile": _influence_split(c.is_driven_foundation_pile, p.parse_driven_foundation_pile),
    "Stelcor drilled displacement pile": _blocks_then_influence(c.is_stelcor_pile, p.parse_stelcor_pile),
    "CFA pile": _influence_split(c.is_cfa_pile, p.parse_cfa_pile),
    "Pile caps": _flat(c.is_pile_cap, p.parse_pile_cap, "PILE_CAP"),
    "Strip Footings": _keyed(c.is_strip_footing, p.parse_strip_footing),
    "Isolated Footings": _flat(c.is_isolated_footing, p.parse_isolated_footing, "ISOLATED_FOOTING"),
    "Pilaster": _flat(c.is_pilaster, p.parse_pilaster, "PILASTER"),
    "Grade beams": _flat(c.is_grade_beam, p.parse_grade_beam, "GRADE_BEAM"),
    "Tie beam": _keyed(c.is_tie_beam, p.parse_tie_beam),
    "Strap beams": _keyed(c.is_strap_beam, p.parse_strap_beam),
    "Thickened slab": _keyed(c.is_thickened_slab, p.parse_thickened_slab),
    "Buttresses": process_buttress_items,
    "Pier": _keyed(c.is_pier, p.parse_pier),
    "Corbel": _keyed(c.is_corbel, p.parse_corbel),
    "Linear Wall": _keyed(c.is_linear_wall, p.parse_linear_wall),
    "Foundation Wall": _keyed(c.is_foundation_wall, p.parse_foundation_wall),
    "Retaining walls": _keyed(c.is_retaining_wall, p.parse_retaining_wall),
    "Barrier wall": _keyed(c.is_barrier_wall, p.parse_barrier_wall),
    "Stem wall": _flat(c.is_stem_wall, p.parse_stem_wall, "STEM_WALL"),
    "Elevator Pit": _pits(c.is_elevator_pit, p.parse_elevator_pit),
    "Service elevator pit": _pits(c.is_service_elevator_pit, p.parse_service_elevator_pit),
    "Detention tank": _pits(c.is_detention_tank, p.parse_detention_tank),
    "Duplex sewage ejector pit": _pits(c.is_duplex_sewage_ejector_pit, p.parse_duplex_sewage_ejector_pit),
    "Deep sewage ejector pit": _pits(c.is_deep_sewage_ejector_pit, p.parse_deep_sewage_ejector_pit),
    "Sump pump pit": _pits(c.is_sump_pump_pit, p.parse_sump_pump_pit),
    "Grease trap": _pits(c.is_grease_trap, p.parse_grease_trap),
    "House trap": _pits(c.is_house_trap, p.parse_house_trap),
    "Mat slab": _mat_slab,
    "Mud Slab": _flat(c.is_mud_slab_foundation, p.parse_mud_slab_foundation, "MUD_SLAB"),
    "SOG": _sog,
    "Stairs on grade Stairs": _stairs,
    "Electric conduit": _flat(c.is_electric_conduit, p.parse_electric_conduit, "ELECTRIC_CONDUIT"),
}


def process_foundation_items(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any],
    tracker: RowClaimTracker | None = None,
) -> dict[str, list[Group]]:
    """Groups of every foundation subsection keyed by template subsection name."""
    out = {name: process(rows, headers, tracker) for name, process in FOUNDATION_SUBSECTIONS.items()}
    logger.debug(f"foundation groups: { {k: len(v) for k, v in out.items() if v} }")
    return out
