from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

"""Parsed item, processed row record and group models.

Phase: parse -> classify -> group. Every record here is frozen; processors
derive new records with ``dataclasses.replace`` instead of mutating.
"""

__all__ = [
    "ParsedItem",
    "Item",
    "Group",
]


@dataclass(frozen=True)
class ParsedItem:
    """Structured parameters extracted from one item description.

    Only ``type`` and ``group_key`` are meaningful for every category; the
    remaining fields are filled by the parsers that know about them.
    Dimensions are decimal feet unless noted otherwise.
    """
    type: str | None = None  # category tag used for formula dispatch
    group_key: str | None = None
    item_sub_type: str | None = None  # slab / wall / mat / haunch / sump_pit ...
    subsection: str | None = None  # template subsection the item belongs to
    # heights
    height_raw: float = 0.0
    calculated_height: float = 0.0
    height_from_h: float | None = None
    height_from_name: float | None = None
    height_formula: str | None = None
    # bracket dimensions
    length: float | None = None
    width: float | None = None
    height: float | None = None
    width_from_name: float | None = None
    width_formula: str | None = None
    length_formula: str | None = None
    first_value_feet: float | None = None
    second_value_feet: float | None = None
    # piles
    diameter: float | None = None  # inches
    thickness: float | None = None  # inches
    diameter2: float | None = None
    thickness2: float | None = None
    is_dual_diameter: bool = False
    hp_weight: float | None = None
    hp_size: str | None = None
    embedment: float | None = None
    rock_socket: float | None = None
    pattern: str | None = None  # E / E+RS / RS / H
    has_influence: bool = False
    # weights (lbs/ft or psf)
    weight: float = 0.0
    weight2: float | None = None
    # anchors / bolts
    free_length: float | None = None
    bond_length: float | None = None
    oc_spacing: float | None = None
    calculated_length: float | None = None
    # counts
    qty: float | None = None
    # misc
    angle_size: str | None = None
    ref_key: str | None = None  # waterproofing height reference
    street: str | None = None
    no_bracket: bool = False
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def with_(self, **changes: Any) -> ParsedItem:
        return replace(self, **changes)


@dataclass(frozen=True)
class Item:
    """One classified raw row (a.k.a. processed row record)."""
    particulars: str  # original Digitizer Item text
    takeoff: float | str  # Total column; '' when blank and the category keeps blanks
    unit: str
    parsed: ParsedItem
    raw_row_number: int  # 1-based row number in the raw sheet (header = 1); 0 for synthetic items
    qty: float | str = ""  # Count column where the category reads it
    weight: float = 0.0
    item_id: str | None = None
    item_type: str | None = None  # processor-level tag (excavation / rock items)

    @property
    def row_index(self) -> int:
        """0-based index into the data rows (header excluded)."""
        return self.raw_row_number - 2

    @property
    def takeoff_value(self) -> float:
        return self.takeoff if isinstance(self.takeoff, (int, float)) else 0.0

    def with_(self, **changes: Any) -> Item:
        return replace(self, **changes)


@dataclass(frozen=True)
class Group:
    """Items sharing a sum row.

    ``is_merged`` marks the one-way MERGED_SINGLES style merge; a merged group
    is never regrouped.
    """
    group_key: str
    items: tuple[Item, ...]
    parsed: ParsedItem | None = None  # representative (first member)
    kind: str | None = None  # hp / drilled / slab / wall / mat ...
    has_influ: bool = False
    is_merged: bool = False
    label: str | None = None  # display name (supporting angle location, stair id)
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __len__(self) -> int:
        return len(self.items)

    def with_(self, **changes: Any) -> Group:
        return replace(self, **changes)
